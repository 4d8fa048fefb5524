"""
Port interface for the remote document archive.

Implementations: FtpArchiveClientAdapter (adapters/)
"""

from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class ArchiveClientPort(Protocol):
    """Read-only access to the authoritative document archive."""

    def retrieve(self, blob_name: str) -> BinaryIO:
        """Fetch a named blob.

        Each call uses its own session, which is terminated before the
        call returns or raises.

        Args:
            blob_name: Name of the blob in the archive (e.g. ``ABC123.pdf``).

        Returns:
            Readable binary stream positioned at the first byte of the blob.
            The caller owns it and must close it.

        Raises:
            ArchiveConnectError: Connection timed out or was refused.
            ArchiveAuthError: Credentials were rejected.
            BlobNotFoundError: The archive has no such blob.
            TransferError: The transfer failed part way.
        """
        ...
