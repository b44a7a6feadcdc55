"""hostinit — Click-based CLI entry point."""

import logging
import os
import sys
from pathlib import Path

import click

from hostinit.config import (
    DNS_APPEND_ENV,
    DNS_SEARCH_ENV,
    NAMESERVER_ENV,
    RESOLV_CONF,
    RESOLV_CONF_ENV,
    SENTINEL_NAMESERVER,
    SYSCTL_ENV,
    SYSCTL_ROOT,
    SYSCTL_ROOT_ENV,
)
from hostinit.core.resolv_conf import render, update_resolv_conf
from hostinit.core.sysctl import apply_settings

logger = logging.getLogger("hostinit")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _from_env(name: str):
    """Default read at invocation time, so the bare ``hostinit`` call sees it too."""
    return lambda: os.environ.get(name, "")


def _apply_sysctl(settings: str, root: Path) -> None:
    result = apply_settings(settings, root)
    logger.info("Sysctl: %s", result.summary)


def _apply_dns(search: str, append: bool, path: Path, sentinel: str) -> None:
    """Run the resolver editor; an unreadable or unwritable file is fatal."""
    try:
        update_resolv_conf(search, append, path, sentinel)
    except OSError as exc:
        logger.error("Failed to update %s: %s", path, exc)
        raise SystemExit(1)


# ======================================================================
# CLI group
# ======================================================================

@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--sysctl-root", envvar=SYSCTL_ROOT_ENV, default=str(SYSCTL_ROOT),
              show_default=True, type=click.Path(path_type=Path),
              help="Root directory of the kernel tunables.")
@click.option("--resolv-conf", envvar=RESOLV_CONF_ENV, default=str(RESOLV_CONF),
              show_default=True, type=click.Path(path_type=Path),
              help="Resolver configuration file to edit.")
@click.option("--nameserver", envvar=NAMESERVER_ENV, default=SENTINEL_NAMESERVER,
              show_default=True, help="Nameserver that must stay active.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, sysctl_root: Path,
        resolv_conf: Path, nameserver: str) -> None:
    """hostinit — Apply kernel tunables and resolver settings at startup."""
    _setup_logging(verbose)
    ctx.obj = {
        "sysctl_root": sysctl_root,
        "resolv_conf": resolv_conf,
        "nameserver": nameserver,
    }
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


# ======================================================================
# run
# ======================================================================

@cli.command()
@click.option("--sysctl", "sysctl_settings", default=_from_env(SYSCTL_ENV),
              show_default=SYSCTL_ENV,
              help="Comma-separated key=value tunables.")
@click.option("--dns-search", default=_from_env(DNS_SEARCH_ENV),
              show_default=DNS_SEARCH_ENV,
              help="Comma-separated search domains.")
@click.option("--dns-append", default=_from_env(DNS_APPEND_ENV),
              show_default=DNS_APPEND_ENV,
              help="'true' appends search domains, anything else prepends.")
@click.pass_obj
def run(obj: dict, sysctl_settings: str, dns_search: str, dns_append: str) -> None:
    """Startup procedure driven by SYSCTL, DNS_SEARCH and DNS_APPEND."""
    if sysctl_settings:
        _apply_sysctl(sysctl_settings, obj["sysctl_root"])
    if dns_append and dns_search:
        _apply_dns(dns_search, dns_append == "true",
                   obj["resolv_conf"], obj["nameserver"])
    else:
        logger.debug("DNS_SEARCH/DNS_APPEND not both set; leaving %s alone.",
                     obj["resolv_conf"])


# ======================================================================
# sysctl
# ======================================================================

@cli.command("sysctl")
@click.argument("settings")
@click.pass_obj
def sysctl_cmd(obj: dict, settings: str) -> None:
    """Write SETTINGS (e.g. 'vm.swappiness=10,net.ipv4.ip_forward=1')."""
    _apply_sysctl(settings, obj["sysctl_root"])


# ======================================================================
# resolv
# ======================================================================

@cli.command("resolv")
@click.option("--search", "-s", required=True, help="Comma-separated search domains.")
@click.option("--append", is_flag=True, help="Add domains after the existing ones.")
@click.option("--dry-run", is_flag=True, help="Print the result instead of writing it.")
@click.pass_obj
def resolv_cmd(obj: dict, search: str, append: bool, dry_run: bool) -> None:
    """Merge search domains and pin the nameserver in the resolver file."""
    if not dry_run:
        _apply_dns(search, append, obj["resolv_conf"], obj["nameserver"])
        return
    try:
        result = render(search, append, obj["resolv_conf"], obj["nameserver"])
    except OSError as exc:
        click.echo(f"Cannot read {obj['resolv_conf']}: {exc}", err=True)
        raise SystemExit(1)
    click.echo(result.data, nl=False)
    click.echo(f"# {result.summary}", err=True)


# ======================================================================
# Entry point
# ======================================================================

if __name__ == "__main__":
    cli()
