"""
Structured error handling and logging.
Provides consistent errors with error codes and context across the
archive client, the cache and the resolver.
"""

from typing import Optional, Dict, Any
import logging

from shared_utils.constants import ErrorCode, LogScope
from shared_utils.logging_utils import get_scoped_logger


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        error_code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        http_status: int = 500
    ):
        self.error_code = error_code
        self.message = message
        self.context = context or {}
        self.http_status = http_status
        super().__init__(self.message)


class ValidationError(AppException):
    """Validation/input error."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.INVALID_INPUT.value,
            message=message,
            context=context,
            http_status=400
        )


class BarcodeEncodingError(ValidationError):
    """Key cannot be rendered as a 200 pixel wide Code 128 barcode."""


class ConfigurationError(AppException):
    """Configuration error."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.INVALID_CONFIG.value,
            message=message,
            context=context,
            http_status=500
        )


# ---------------------------------------------------------------------------
# Remote archive errors
# ---------------------------------------------------------------------------

class ArchiveError(AppException):
    """Remote archive could not serve a blob for reasons other than absence."""

    def __init__(
        self,
        error_code: str,
        host: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            error_code=error_code,
            message=f"archive {host}: {message}",
            context={**(context or {}), "host": host},
            http_status=503
        )


class ArchiveConnectError(ArchiveError):
    """Connection to the archive timed out, was refused or greeted badly."""

    def __init__(self, host: str, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.ARCHIVE_CONNECT_FAILED.value, host, message, context)


class ArchiveAuthError(ArchiveError):
    """Archive rejected the configured credentials."""

    def __init__(self, host: str, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.ARCHIVE_AUTH_FAILED.value, host, message, context)


class TransferError(ArchiveError):
    """Transfer failed after the blob was requested."""

    def __init__(self, host: str, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.ARCHIVE_TRANSFER_FAILED.value, host, message, context)


class BlobNotFoundError(AppException):
    """Archive has no blob with the requested name."""

    def __init__(self, blob_name: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.BLOB_NOT_FOUND.value,
            message=f"blob {blob_name} not found in archive",
            context={**(context or {}), "blob_name": blob_name},
            http_status=404
        )


# ---------------------------------------------------------------------------
# Local cache errors
# ---------------------------------------------------------------------------

class CacheWriteError(AppException):
    """Materializing a blob into the cache directory failed."""

    def __init__(self, filename: str, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.CACHE_WRITE_FAILED.value,
            message=f"failed to write {filename}: {message}",
            context={**(context or {}), "filename": filename},
            http_status=500
        )


# ---------------------------------------------------------------------------
# Resolution outcomes
# ---------------------------------------------------------------------------

class DocumentNotFoundError(AppException):
    """Document is neither cached nor obtainable from the archive."""

    def __init__(self, key: str, stage: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.DOCUMENT_NOT_FOUND.value,
            message=f"document {key} not found",
            context={**(context or {}), "key": key, "stage": stage},
            http_status=404
        )


class ArchiveUnavailableError(AppException):
    """Document is not cached and the archive could not be reached."""

    def __init__(self, key: str, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.ARCHIVE_UNAVAILABLE.value,
            message=f"archive unavailable for {key}: {message}",
            context={**(context or {}), "key": key},
            http_status=503
        )


def log_exception(
    exc: Exception,
    scope: str = LogScope.ERROR_HANDLER,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log exception with structured context.

    Args:
        exc: Exception to log
        scope: Log scope identifier
        logger: Optional custom logger (uses structlog if not provided)
    """
    if logger is None:
        logger = get_scoped_logger(scope)

    if isinstance(exc, AppException):
        logger.error(
            "app_exception",
            error_code=exc.error_code,
            message=exc.message,
            http_status=exc.http_status,
            context=exc.context
        )
    else:
        logger.error(
            "unexpected_exception",
            error_type=type(exc).__name__,
            message=str(exc),
            exc_info=exc,
        )
