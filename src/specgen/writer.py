"""Write generated artifacts to disk.

All writes use an atomic temp-file-then-rename strategy so that an
interrupted run never leaves a half-written module behind.  Callers that
want a different destination (an in-memory map in tests, a zip archive)
pass their own ``(path, text) -> None`` callable wherever an
:data:`ArtifactWriter` is accepted.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

ArtifactWriter = Callable[[Path, str], None]


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  On any failure the
    temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def write_artifact(path: Path, text: str) -> None:
    """Default :data:`ArtifactWriter`: atomic write to the filesystem."""
    atomic_write(path, text)
