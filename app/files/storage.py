import logging
import os
import posixpath
import tempfile
from pathlib import Path
from typing import BinaryIO, List

from app.shared.errors import InvalidFilename, UploadTooLarge

logger = logging.getLogger(__name__)

CHUNK = 1024 * 1024

def clean_filename(name: str) -> str:
    """
    Normalise an uploaded name into a path relative to the user's home.

    ``a/./b.txt`` -> ``a/b.txt``, ``/etc/x`` -> ``etc/x``. Anything that still
    climbs out (``../x``, ``a/../../x``) or collapses to nothing is rejected.
    """
    cleaned = posixpath.normpath(name or "")
    if ".." in cleaned.split("/"):
        logger.warning("rejected traversal filename %r", name)
        raise InvalidFilename("invalid filename")
    cleaned = cleaned.lstrip("/")
    if cleaned in ("", "."):
        raise InvalidFilename("invalid filename")
    return cleaned

def save_stream(src: BinaryIO, target: Path, max_bytes: int) -> int:
    """
    Copy ``src`` to ``target`` via a temp file in the same directory.

    The temp file is renamed over ``target`` only after the whole stream was
    written and flushed; on any failure it is removed and ``target`` is left
    untouched. Returns the number of bytes written.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=".upload-")
    size = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = src.read(CHUNK)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise UploadTooLarge(f"file too large. max {max_bytes} bytes")
                out.write(chunk)
            out.flush()
            os.fsync(out.fileno())
        os.replace(tmp, target)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return size

def read_head(path: Path, line_limit: int) -> str:
    """First ``line_limit`` lines of ``path``, decoded as UTF-8."""
    lines: List[bytes] = []
    with path.open("rb") as f:
        for line in f:
            if len(lines) >= line_limit:
                break
            lines.append(line)
    return b"".join(lines).decode("utf-8", errors="replace")
