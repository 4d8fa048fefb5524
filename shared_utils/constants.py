"""
Constants management.
Centralized configuration for all magic values, defaults, and wire strings.
"""

from enum import Enum
from typing import Final


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    # Short aliases (config accepts dev|stage|prod)
    DEV = "dev"
    STAGE = "stage"
    PROD = "prod"


# Default values
class Defaults:
    """Service defaults for all configurations."""
    LISTEN_ADDR: Final[str] = ":5000"
    DOCUMENT_DIRECTORY: Final[str] = "."
    FTP_HOST: Final[str] = "localhost"
    FTP_PORT: Final[int] = 21
    FTP_USER: Final[str] = "userftp"
    FTP_PASSWORD: Final[str] = "pwd"
    FTP_CONNECT_TIMEOUT: Final[float] = 5.0
    FTP_SPOOL_MAX_BYTES: Final[int] = 8 * 1024 * 1024
    WRITE_TIMEOUT: Final[float] = 10.0
    IDLE_TIMEOUT: Final[float] = 15.0
    SHUTDOWN_GRACE_PERIOD: Final[float] = 30.0
    COPY_CHUNK_SIZE: Final[int] = 1 << 20
    LOG_LEVEL: Final[str] = "INFO"


# Barcode raster geometry
class BarcodeDefaults:
    """Fixed raster size of generated barcode labels."""
    WIDTH: Final[int] = 200
    HEIGHT: Final[int] = 200
    BAR: Final[int] = 0
    SPACE: Final[int] = 255


# Logging scopes
class LogScope:
    """Standardized logging scope names."""
    CONFIG = "config_loader"
    API = "api"
    VALIDATION = "validation"
    ERROR_HANDLER = "error_handler"
    ADAPTER = "adapter"
    RESOLVER = "document_resolver"
    BARCODE = "barcode"
    MIDDLEWARE = "middleware"
    LIFECYCLE = "lifecycle"


# API endpoints and paths
class APIEndpoints:
    """API route definitions."""
    INDEX = "/"
    HEALTH = "/healthz"
    ATTESTATION = "/attestation"
    BARCODE = "/sampleIdToBarCode"


class Headers:
    """HTTP header names used across middleware and handlers."""
    REQUEST_ID: Final[str] = "X-Request-Id"
    CONTENT_TYPE_OPTIONS: Final[str] = "X-Content-Type-Options"


# Response bodies that form part of the public contract
class ResponseText:
    """Fixed response bodies."""
    INDEX: Final[str] = "Hello, Folks!\n"
    HEALTHY: Final[str] = "UP\n"
    NOT_FOUND: Final[str] = "Not Found\n"
    GATEWAY_TIMEOUT: Final[str] = "Gateway Timeout\n"
    INTERNAL_ERROR: Final[str] = "Internal Server Error\n"
    PDF_NOT_FOUND_HTML: Final[str] = (
        "<!DOCTYPE html>\n"
        "<html lang=\"en\"><head></head>\n"
        "<body><p>Impossible de lire l'attestation vétérinaire. Non Trouvé</p></body>"
    )
    BARCODE_WRITTEN: Final[str] = "L'étiquette code barre est disponible sous {path}\n"


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes for consistency."""
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_INPUT = "INVALID_INPUT"
    ARCHIVE_CONNECT_FAILED = "ARCHIVE_CONNECT_FAILED"
    ARCHIVE_AUTH_FAILED = "ARCHIVE_AUTH_FAILED"
    ARCHIVE_TRANSFER_FAILED = "ARCHIVE_TRANSFER_FAILED"
    BLOB_NOT_FOUND = "BLOB_NOT_FOUND"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    ARCHIVE_UNAVAILABLE = "ARCHIVE_UNAVAILABLE"
