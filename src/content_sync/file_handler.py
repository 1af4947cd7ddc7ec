"""File handler module: encoding-aware reads and atomic writes.

Backs the flat-file durable store.  All functions are synchronous; callers
on the event loop wrap them with ``run_sync()``.
"""

import os
import tempfile
from pathlib import Path

from charset_normalizer import from_bytes


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file, decoding as UTF-8 and detecting anything else.

    Everything this package writes is UTF-8, so a strict UTF-8 decode is
    tried first.  Only bytes that are not valid UTF-8 (a cache file seeded
    by hand in another codepage) go through charset-normalizer detection.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    try:
        return (raw.decode("utf-8"), "utf-8")
    except UnicodeDecodeError:
        pass

    result = from_bytes(raw).best()
    if result is None:
        return (raw.decode("utf-8", errors="replace"), "utf-8")
    return (str(result), result.encoding)


def write_file_atomic(
    path: Path, content: str, encoding: str = "utf-8"
) -> int:
    """Write *content* to *path* so readers never see a partial file.

    Writes to a temporary file in the same directory, then ``os.replace()``
    swaps it into place.  Parent directories are created as needed.

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode(encoding)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return len(encoded)


def remove_file(path: Path) -> bool:
    """Delete *path* if it exists.

    Returns:
        ``True`` if a file was removed, ``False`` if it was already absent.
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True
