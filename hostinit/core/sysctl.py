"""Sysctl applier — write ``key=value`` tunables under ``/proc/sys``."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from hostinit.config import SYSCTL_FILE_MODE, SYSCTL_ROOT
from hostinit.core.files import write_file

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Data structures
# ------------------------------------------------------------------

@dataclass
class SysctlSetting:
    """A single tunable, e.g. ``net.ipv4.ip_forward=1``."""

    key: str
    value: str


@dataclass
class ApplyResult:
    """Outcome of applying a batch of settings."""

    succeeded: list[SysctlSetting] = field(default_factory=list)
    failed: list[tuple[SysctlSetting, str]] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return len(self.failed) == 0

    @property
    def summary(self) -> str:
        return f"{len(self.succeeded)} applied, {len(self.failed)} failed"


# ------------------------------------------------------------------
# Parsing
# ------------------------------------------------------------------

def parse_settings(raw: str) -> list[SysctlSetting]:
    """Parse a comma-separated ``key=value`` list.

    Each entry is split on its first ``=``.  Entries without one are
    skipped.  Keys and values are taken verbatim (no trimming).
    """
    settings = []
    for entry in raw.split(","):
        key, sep, value = entry.partition("=")
        if not sep:
            continue
        settings.append(SysctlSetting(key, value))
    return settings


def sysctl_path(key: str, root: Path = SYSCTL_ROOT) -> Path:
    """Map a dotted key to its file: ``vm.swappiness`` → ``<root>/vm/swappiness``.

    Leading slashes are dropped from each segment so the result stays under
    *root*.
    """
    return Path(root).joinpath(*(segment.lstrip("/") for segment in key.split(".")))


# ------------------------------------------------------------------
# Apply
# ------------------------------------------------------------------

def apply_settings(raw: str, root: Path = SYSCTL_ROOT) -> ApplyResult:
    """Write every setting in *raw* below *root*.

    A failing write is logged and the remaining settings are still applied;
    nothing is raised to the caller.
    """
    result = ApplyResult()
    for setting in parse_settings(raw):
        path = sysctl_path(setting.key, root)
        try:
            write_file(path, os.fsencode(setting.value), SYSCTL_FILE_MODE)
        except OSError as exc:
            logger.error("Failed to set sysctl key %s: %s", setting.key, exc)
            result.failed.append((setting, str(exc)))
            continue
        logger.debug("Set %s = %r (%s)", setting.key, setting.value, path)
        result.succeeded.append(setting)
    return result
