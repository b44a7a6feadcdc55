"""Resolver editor — pin the sentinel nameserver and merge search domains.

The file is rewritten line by line.  Nothing is ever removed: foreign
``nameserver`` entries are commented out, an existing ``search`` line gains
the requested domains, and a ``search`` / ``nameserver`` line is appended
when the document lacks one.  Running the editor again with the same input
leaves the file as it is.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from hostinit.config import RESOLV_CONF, RESOLV_CONF_MODE, SENTINEL_NAMESERVER
from hostinit.core.files import write_file

logger = logging.getLogger(__name__)

NAMESERVER_TOKEN = "nameserver"
SEARCH_TOKEN = "search"

# Bytes that are not UTF-8 pass through the rewrite unchanged
ENCODING = "utf-8"
DECODE_ERRORS = "surrogateescape"


class LineKind(Enum):
    SENTINEL_NAMESERVER = "sentinel_nameserver"
    SENTINEL_SEARCH = "sentinel_search"
    NAMESERVER = "nameserver"
    SEARCH = "search"
    OTHER = "other"


@dataclass
class RewriteResult:
    """The rewritten document plus what the pass found in the original."""

    lines: list[str] = field(default_factory=list)
    search_set: bool = False
    nameserver_set: bool = False
    commented: int = 0
    amended: int = 0

    @property
    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)

    @property
    def data(self) -> bytes:
        return self.text.encode(ENCODING, DECODE_ERRORS)

    @property
    def summary(self) -> str:
        parts = []
        if self.commented:
            parts.append(f"{self.commented} nameserver(s) commented")
        if self.amended:
            parts.append(f"{self.amended} search line(s) amended")
        if not self.search_set:
            parts.append("search line added")
        if not self.nameserver_set:
            parts.append("nameserver added")
        return ", ".join(parts) if parts else "No changes"


# ------------------------------------------------------------------
# Line helpers
# ------------------------------------------------------------------

def classify_line(line: str, sentinel: str = SENTINEL_NAMESERVER) -> LineKind:
    """Tag a resolver line.

    Any line mentioning the sentinel address counts as the sentinel entry,
    commented or not.  A ``search`` line carrying it is both: it marks the
    nameserver as present and still gets its domains merged.  The remaining
    checks are plain prefix tests.
    """
    if sentinel in line:
        if line.startswith(SEARCH_TOKEN):
            return LineKind.SENTINEL_SEARCH
        return LineKind.SENTINEL_NAMESERVER
    if line.startswith(NAMESERVER_TOKEN):
        return LineKind.NAMESERVER
    if line.startswith(SEARCH_TOKEN):
        return LineKind.SEARCH
    return LineKind.OTHER


def split_domains(search: str) -> list[str]:
    return search.split(",")


def missing_domains(line: str, domains: list[str]) -> list[str]:
    """Return the *domains* not yet on *line*.

    Presence is a substring test on ``" " + domain``, so ``ex`` is
    reported present on ``search example.com``.
    """
    return [d for d in domains if " " + d not in line]


def split_lines(text: str) -> list[str]:
    """Split on ``\\n``, dropping one trailing ``\\r`` per line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


# ------------------------------------------------------------------
# Rewrite
# ------------------------------------------------------------------

def rewrite(
    lines: list[str],
    search: str,
    append: bool,
    sentinel: str = SENTINEL_NAMESERVER,
) -> RewriteResult:
    """Apply the nameserver / search-domain policy to *lines*."""
    domains = split_domains(search)
    result = RewriteResult()

    for line in lines:
        kind = classify_line(line, sentinel)

        if kind in (LineKind.SENTINEL_NAMESERVER, LineKind.SENTINEL_SEARCH):
            result.nameserver_set = True
        elif kind is LineKind.NAMESERVER:
            line = "# " + line
            result.commented += 1

        if kind in (LineKind.SEARCH, LineKind.SENTINEL_SEARCH):
            to_add = missing_domains(line, domains)
            if to_add:
                joined = " ".join(to_add)
                if append:
                    line = f"{line} {joined}"
                else:
                    line = line.replace(SEARCH_TOKEN, f"{SEARCH_TOKEN} {joined}", 1)
                result.amended += 1
            result.search_set = True

        result.lines.append(line)

    if not result.search_set:
        result.lines.append(f"{SEARCH_TOKEN} " + " ".join(domains).lower())
    if not result.nameserver_set:
        result.lines.append(f"{NAMESERVER_TOKEN} {sentinel}")

    return result


def render(
    search: str,
    append: bool,
    path: Path = RESOLV_CONF,
    sentinel: str = SENTINEL_NAMESERVER,
) -> RewriteResult:
    """Read *path* and compute its rewrite without touching the file.

    Raises ``OSError`` if the file cannot be read.
    """
    text = Path(path).read_text(encoding=ENCODING, errors=DECODE_ERRORS)
    return rewrite(split_lines(text), search, append, sentinel)


def update_resolv_conf(
    search: str,
    append: bool,
    path: Path = RESOLV_CONF,
    sentinel: str = SENTINEL_NAMESERVER,
) -> RewriteResult:
    """Rewrite *path* in place.

    The file is read in full and closed before it is truncated and written
    again; an unreadable file raises ``OSError`` and nothing is written.
    """
    result = render(search, append, path, sentinel)
    write_file(Path(path), result.data, RESOLV_CONF_MODE)
    logger.info("Updated %s: %s", path, result.summary)
    return result
