"""
Document resolver. Serves a document from the local cache, falling back to
the remote archive and promoting what it fetches into the cache.

Flow:  local lookup → (miss) remote fetch → materialize → re-open.

Depends only on ports (protocol interfaces), never on concrete adapters.
There is no per-key locking: two concurrent misses for the same key both
fetch and both publish. Archive blobs are immutable and the cache publishes
by rename, so readers never see a partial or mixed file.
"""

from __future__ import annotations

from pathlib import Path

from domain.models import ResolutionStage
from ports.archive_client import ArchiveClientPort
from ports.document_cache import DocumentCachePort
from shared_utils.constants import LogScope
from shared_utils.error_handler import (
    ArchiveError,
    ArchiveUnavailableError,
    BlobNotFoundError,
    CacheWriteError,
    DocumentNotFoundError,
)
from shared_utils.logging_utils import get_scoped_logger

logger = get_scoped_logger(LogScope.RESOLVER)


class DocumentResolver:
    """Resolves document keys to readable local paths."""

    def __init__(
        self,
        archive: ArchiveClientPort,
        cache: DocumentCachePort,
    ) -> None:
        self._archive = archive
        self._cache = cache

    def resolve(self, key: str, extension: str, request_id: str = "unknown") -> Path:
        """Return a readable local path for ``key + extension``.

        A cache hit never touches the archive. A miss performs exactly one
        remote fetch; there are no retries.

        Args:
            key: Document key, used verbatim.
            extension: Filename suffix including the dot (``.pdf``).
            request_id: Correlation id of the calling request, bound into
                every log line of this resolution.

        Returns:
            Canonical path of the cached document.

        Raises:
            DocumentNotFoundError: The archive has no such blob, or the
                fetched blob could not be re-opened from the cache.
            ArchiveUnavailableError: The archive could not be reached,
                rejected the login, or failed mid-transfer.
        """
        filename = f"{key}{extension}"
        log = logger.bind(request_id=request_id, key=key, filename=filename)

        path = self._cache.locate(filename)
        if path is not None:
            log.info("document_cache_hit", stage=ResolutionStage.LOCAL_LOOKUP.value, path=str(path))
            return path

        log.info("document_cache_miss", stage=ResolutionStage.LOCAL_LOOKUP.value)

        try:
            stream = self._archive.retrieve(filename)
        except BlobNotFoundError as exc:
            log.warning(
                "document_absent_from_archive",
                stage=ResolutionStage.REMOTE_FETCH.value,
                error_code=exc.error_code,
            )
            raise DocumentNotFoundError(key, ResolutionStage.REMOTE_FETCH.value) from exc
        except ArchiveError as exc:
            log.error(
                "archive_unavailable",
                stage=ResolutionStage.REMOTE_FETCH.value,
                error_code=exc.error_code,
                error=exc.message,
            )
            raise ArchiveUnavailableError(
                key, exc.message, context={"stage": ResolutionStage.REMOTE_FETCH.value}
            ) from exc

        with stream:
            try:
                self._cache.materialize(filename, stream)
            except CacheWriteError as exc:
                # The re-open below decides the outcome.
                log.error(
                    "document_materialize_failed",
                    stage=ResolutionStage.MATERIALIZE.value,
                    error_code=exc.error_code,
                    error=exc.message,
                )

        path = self._cache.locate(filename)
        if path is None:
            log.error("document_reopen_failed", stage=ResolutionStage.REOPEN.value)
            raise DocumentNotFoundError(key, ResolutionStage.REOPEN.value)

        log.info("document_promoted", stage=ResolutionStage.REOPEN.value, path=str(path))
        return path
