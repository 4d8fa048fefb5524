"""
Local filesystem document cache adapter.

Implements DocumentCachePort over a flat directory. Entries are written to a
temporary file in the same directory and published with ``os.replace``, so
the canonical name only ever points at a complete file.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional

from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import CacheWriteError
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.ADAPTER)

_TEMP_SUFFIX = ".part"


class LocalDocumentCacheAdapter:
    """Directory-backed implementation of DocumentCachePort.

    Concurrent ``materialize`` calls for the same name are safe without
    locking: each one writes its own temporary file and the last rename wins.
    """

    def __init__(self, cache_dir: Path | str, chunk_size: int = Defaults.COPY_CHUNK_SIZE) -> None:
        self.cache_dir = Path(cache_dir)
        self.chunk_size = chunk_size

    # ------------------------------------------------------------------
    # DocumentCachePort implementation
    # ------------------------------------------------------------------

    def path_for(self, filename: str) -> Path:
        """Canonical path of ``filename`` in the cache directory."""
        return self.cache_dir / filename

    def locate(self, filename: str) -> Optional[Path]:
        """Open the canonical path to confirm it is readable."""
        path = self.path_for(filename)
        try:
            with open(path, "rb"):
                pass
        except OSError as exc:
            logger.debug("cache_entry_unreadable", path=str(path), error_type=type(exc).__name__)
            return None
        return path

    def materialize(self, filename: str, source: BinaryIO) -> Path:
        """Stream ``source`` to a temp file, fsync it, then rename into place."""
        final_path = self.path_for(filename)
        tmp_path: Optional[str] = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.cache_dir, prefix=f".{filename}.", suffix=_TEMP_SUFFIX
            )
            with os.fdopen(fd, "wb") as tmp:
                shutil.copyfileobj(source, tmp, self.chunk_size)
                tmp.flush()
                os.fsync(tmp.fileno())
                size = tmp.tell()
            os.replace(tmp_path, final_path)
        except OSError as exc:
            if tmp_path is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_path)
            logger.error(
                "cache_materialize_failed",
                path=str(final_path),
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise CacheWriteError(filename, str(exc), context={"cache_dir": str(self.cache_dir)}) from exc

        logger.info("cache_entry_published", path=str(final_path), size_bytes=size)
        return final_path
