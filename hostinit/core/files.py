"""File helpers — whole-file writes with an explicit creation mode."""

import os
from pathlib import Path


def write_file(path: Path, data: bytes, mode: int) -> None:
    """Replace the contents of *path* with *data*.

    The file is created with *mode* (subject to the umask) when missing and
    truncated otherwise.  Permissions of an existing file are left alone.
    """
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as fh:
        fh.write(data)
