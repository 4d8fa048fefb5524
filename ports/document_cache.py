"""
Port interface for the local document cache.

Implementations: LocalDocumentCacheAdapter (adapters/)
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional, Protocol, runtime_checkable


@runtime_checkable
class DocumentCachePort(Protocol):
    """Flat directory of immutable documents, published by rename."""

    def path_for(self, filename: str) -> Path:
        """Return the canonical cache path for ``filename``."""
        ...

    def locate(self, filename: str) -> Optional[Path]:
        """Return the cached path if it can be opened for reading.

        Args:
            filename: Entry name (``key + extension``).

        Returns:
            Canonical path on a hit, None on any miss or local I/O error.
        """
        ...

    def materialize(self, filename: str, source: BinaryIO) -> Path:
        """Copy ``source`` into the cache and publish it as ``filename``.

        Readers of the canonical path see either no file or the complete
        file, never a partial one.

        Args:
            filename: Entry name (``key + extension``).
            source: Readable binary stream; read to exhaustion, not closed.

        Returns:
            Canonical path of the published entry.

        Raises:
            CacheWriteError: If writing or publishing fails.
        """
        ...
