"""
Filesystem safety utilities for charthost.

Output file names are derived from upstream URLs and chart names, so they are
validated before anything is written, and cache files are replaced atomically
so that a failed write never clobbers the previous copy.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path


def safe_filename(name: str) -> str:
    """
    Validate a single path component used as an output file name.

    Rejects empty names, "." and "..", and anything containing a path
    separator, so a file can only ever land directly inside its directory.

    Raises:
        ValueError: If the name is unsafe

    Examples:
        >>> safe_filename("mychart-1.0.0.tgz")
        'mychart-1.0.0.tgz'

        >>> safe_filename("../evil.tgz")
        ValueError: unsafe file name: ../evil.tgz
    """
    if not name or name in (".", ".."):
        raise ValueError(f"unsafe file name: {name}")
    if "/" in name or "\\" in name or "\x00" in name:
        raise ValueError(f"unsafe file name: {name}")
    return name


def write_bytes_atomically(target_path: Path, data: bytes, *, mode: int = 0o600) -> None:
    """
    Write bytes to a file via a temp file and rename.

    The previous content of ``target_path`` survives any failure.

    Raises:
        OSError: If file operations fail
    """
    target_path = Path(target_path)
    fd, temp_name = tempfile.mkstemp(prefix=".charthost.tmp.", dir=target_path.parent)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as out:
            out.write(data)
            out.flush()
            os.fsync(out.fileno())
        os.chmod(temp_path, mode)
        os.replace(temp_path, target_path)
    except BaseException:
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        raise
