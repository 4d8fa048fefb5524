"""
Dependency injection container for managing application dependencies.
Centralizes adapter and service creation and lifecycle management.
"""

from typing import Optional

from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.CONFIG)


class DIContainer:
    """Singleton dependency injection container."""

    _instance: Optional['DIContainer'] = None

    _archive_client: Optional[object] = None
    _document_cache: Optional[object] = None
    _document_resolver: Optional[object] = None
    _barcode_service: Optional[object] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def reset(self):
        """Reset container (useful for testing)."""
        self._archive_client = None
        self._document_cache = None
        self._document_resolver = None
        self._barcode_service = None

    # ------------------------------------------------------------------
    # Adapter accessors
    # ------------------------------------------------------------------

    def get_archive_client(self):
        """Get or create FtpArchiveClientAdapter (lazy singleton).

        The adapter holds configuration only; each retrieval opens its own
        FTP session.
        """
        if self._archive_client is None:
            from adapters.ftp_archive_client import FtpArchiveClientAdapter

            settings = get_settings()
            self._archive_client = FtpArchiveClientAdapter(
                host=settings.ftp_host,
                port=settings.ftp_port,
                user=settings.ftp_user,
                password=settings.ftp_password,
                connect_timeout=settings.ftp_connect_timeout,
                spool_max_bytes=settings.ftp_spool_max_bytes,
            )
            logger.info("initialized_ftp_archive_client", host=settings.ftp_host)
        return self._archive_client

    def get_document_cache(self):
        """Get or create LocalDocumentCacheAdapter (lazy singleton)."""
        if self._document_cache is None:
            from adapters.local_document_cache import LocalDocumentCacheAdapter

            settings = get_settings()
            self._document_cache = LocalDocumentCacheAdapter(settings.document_directory)
            logger.info(
                "initialized_local_document_cache",
                cache_dir=str(settings.document_directory),
            )
        return self._document_cache

    # ------------------------------------------------------------------
    # Service accessors
    # ------------------------------------------------------------------

    def get_document_resolver(self):
        """Get or create DocumentResolver (lazy singleton)."""
        if self._document_resolver is None:
            from services.document_resolver import DocumentResolver

            self._document_resolver = DocumentResolver(
                archive=self.get_archive_client(),
                cache=self.get_document_cache(),
            )
            logger.info("initialized_document_resolver")
        return self._document_resolver

    def get_barcode_service(self):
        """Get or create BarcodeService (lazy singleton)."""
        if self._barcode_service is None:
            from services.barcode_service import BarcodeService

            self._barcode_service = BarcodeService(cache=self.get_document_cache())
            logger.info("initialized_barcode_service")
        return self._barcode_service


# Global singleton instance
_container = DIContainer()


def get_di_container() -> DIContainer:
    """Get global DI container instance."""
    return _container
