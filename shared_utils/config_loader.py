from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from shared_utils.constants import Defaults, Environment, LogScope
from shared_utils.logging_utils import LogLevel, get_scoped_logger

logger = get_scoped_logger(LogScope.CONFIG)


_ENVIRONMENT_ALIASES = {
    Environment.DEV.value: Environment.DEVELOPMENT.value,
    Environment.STAGE.value: Environment.STAGING.value,
    Environment.PROD.value: Environment.PRODUCTION.value,
}


class Settings(BaseSettings):
    """Application configuration with environment variable precedence.

    Precedence: 1) Environment Variables > 2) .env file > 3) Class defaults

    Values are fixed at process start; nothing here is mutated at runtime.
    """
    # Application metadata
    app_name: str = "Attestation Document Service"
    app_version: str = "1.0.0"
    app_description: str = "Serves cached attestation PDFs with FTP archive fallback"

    # Environment
    environment: str = Environment.DEVELOPMENT.value
    log_level: str = Defaults.LOG_LEVEL

    # HTTP listener
    listen_addr: str = Defaults.LISTEN_ADDR
    write_timeout: float = Defaults.WRITE_TIMEOUT
    idle_timeout: float = Defaults.IDLE_TIMEOUT
    shutdown_grace_period: float = Defaults.SHUTDOWN_GRACE_PERIOD

    # Local document cache
    document_directory: Path = Path(Defaults.DOCUMENT_DIRECTORY)

    # Remote FTP archive
    ftp_host: str = Defaults.FTP_HOST
    ftp_port: int = Defaults.FTP_PORT
    ftp_user: str = Defaults.FTP_USER
    ftp_password: str = Defaults.FTP_PASSWORD
    ftp_connect_timeout: float = Defaults.FTP_CONNECT_TIMEOUT
    ftp_spool_max_bytes: int = Defaults.FTP_SPOOL_MAX_BYTES

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is recognized, expanding short aliases."""
        v = _ENVIRONMENT_ALIASES.get(v.lower(), v.lower())
        valid_envs = set(_ENVIRONMENT_ALIASES.values())
        if v not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}, got {v}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got {v}")
        return v.upper()

    @field_validator('listen_addr')
    @classmethod
    def validate_listen_addr(cls, v: str) -> str:
        """Validate ``[host]:port`` form."""
        host, sep, port = v.rpartition(":")
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"listen_addr must look like 'host:port' or ':port', got {v}")
        return v

    @field_validator('ftp_port')
    @classmethod
    def validate_ftp_port(cls, v: int) -> int:
        """Validate archive port range."""
        if not 0 < v < 65536:
            raise ValueError(f"ftp_port must be between 1 and 65535, got {v}")
        return v

    @field_validator(
        'ftp_connect_timeout', 'write_timeout',
        'idle_timeout', 'shutdown_grace_period',
    )
    @classmethod
    def validate_positive_seconds(cls, v: float) -> float:
        """Timeouts must be strictly positive."""
        if v <= 0:
            raise ValueError(f"timeouts must be > 0 seconds, got {v}")
        return v

    def get_listen_host_port(self) -> Tuple[str, int]:
        """Split ``listen_addr`` into (host, port).

        An empty host (``":5000"``) listens on all interfaces.

        Returns:
            Host and port tuple (e.g. ``("0.0.0.0", 5000)``)
        """
        host, _, port = self.listen_addr.rpartition(":")
        return (host.strip("[]") or "0.0.0.0", int(port))


@lru_cache()
def get_settings() -> Settings:
    """Load and cache application settings.

    Returns:
        Validated Settings instance

    Raises:
        ValueError: If settings are invalid
    """
    settings = Settings()

    # Log loaded configuration (password omitted)
    logger.info(
        "configuration_loaded",
        environment=settings.environment,
        listen_addr=settings.listen_addr,
        document_directory=str(settings.document_directory),
        ftp_host=settings.ftp_host,
        ftp_port=settings.ftp_port,
        ftp_user=settings.ftp_user,
    )

    return settings
