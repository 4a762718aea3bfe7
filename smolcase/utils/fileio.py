"""Atomic file writes.

The target is never truncated in place: content goes to a temporary file in
the same directory, is flushed to disk, then renamed over the target.
"""

import os
import stat
import tempfile
from pathlib import Path


def _default_mode(path: Path) -> int:
    """Permission bits of the existing target, or the umask default for a new file."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def atomic_write_bytes(path: Path, data: bytes, mode: int | None = None) -> None:
    """
    Replace path with data in one rename.

    Args:
        path: Destination file
        data: Full new content
        mode: Permission bits for the new file. When None, an existing
            target keeps its mode and a new file gets the umask default.

    Raises:
        OSError: If the write or rename fails. The temporary file is removed
            and the original target is left untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if mode is None:
        mode = _default_mode(path)

    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8", mode: int | None = None) -> None:
    """Text variant of atomic_write_bytes()."""
    atomic_write_bytes(path, text.encode(encoding), mode=mode)
