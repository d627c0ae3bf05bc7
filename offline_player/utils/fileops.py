"""Owner-only file helpers for the config file, which may hold an access token."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def secure_mkdir(path: Path) -> None:
    """Create ``path`` and any missing parents, then restrict it to 0o700.

    An existing directory is tightened to 0o700 as well.
    """
    path.mkdir(parents=True, exist_ok=True)
    path.chmod(0o700)


def secure_atomic_write(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` as an 0o600 file.

    The parent directory is created through :func:`secure_mkdir`. Content
    goes to a temporary file beside ``path`` first and is renamed into
    place, so the file is never visible half written or with wider
    permissions.
    """
    secure_mkdir(path.parent)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".tmp")
    try:
        os.fchmod(fd, 0o600)
        with open(fd, "w", encoding="utf-8") as f:
            f.write(content)
        Path(tmp_name).replace(path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
