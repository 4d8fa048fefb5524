"""
Process entrypoint: command-line flags → settings → uvicorn.

Flags override the environment and ``.env``. The single-dash spellings
(``-listen-addr``, ``-srvFtp``, ...) are accepted for existing deployment
scripts.

    python -m api_service.src.server --listen-addr :5000 --directory /data/pdf \
        --srv-ftp archive.local --user-ftp reader --pwd-ftp secret
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Dict, Optional, Sequence

import uvicorn
from pydantic import ValidationError as PydanticValidationError

from api_service.src.lifecycle import GracefulServer
from shared_utils.config_loader import Settings, get_settings
from shared_utils.constants import LogScope
from shared_utils.error_handler import ConfigurationError, log_exception
from shared_utils.logging_utils import get_scoped_logger

logger = get_scoped_logger(LogScope.LIFECYCLE)

# argparse dest → settings environment variable
_FLAG_ENV_VARS: Dict[str, str] = {
    "listen_addr": "LISTEN_ADDR",
    "directory": "DOCUMENT_DIRECTORY",
    "srv_ftp": "FTP_HOST",
    "user_ftp": "FTP_USER",
    "pwd_ftp": "FTP_PASSWORD",
    "log_level": "LOG_LEVEL",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="attestation-server",
        description="Serve attestation PDFs from a local cache backed by an FTP archive.",
    )
    parser.add_argument("--listen-addr", "-listen-addr", dest="listen_addr",
                        help="server listen address (default :5000)")
    parser.add_argument("--directory", "-directory", dest="directory",
                        help="document cache directory (default .)")
    parser.add_argument("--srv-ftp", "-srvFtp", dest="srv_ftp",
                        help="FTP archive host name (default localhost)")
    parser.add_argument("--user-ftp", "-userFtp", dest="user_ftp",
                        help="FTP archive user name")
    parser.add_argument("--pwd-ftp", "-pwdFtp", dest="pwd_ftp",
                        help="FTP archive password")
    parser.add_argument("--log-level", dest="log_level",
                        help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    return parser


def apply_overrides(args: argparse.Namespace) -> Dict[str, str]:
    """Export the flags that were given as settings environment variables."""
    applied = {}
    for dest, env_var in _FLAG_ENV_VARS.items():
        value = getattr(args, dest, None)
        if value is not None:
            os.environ[env_var] = value
            applied[env_var] = value
    get_settings.cache_clear()
    return applied


def load_settings() -> Settings:
    """Load settings, reporting invalid values as a ConfigurationError."""
    try:
        return get_settings()
    except PydanticValidationError as exc:
        raise ConfigurationError(
            "invalid settings", context={"errors": [e["msg"] for e in exc.errors()]}
        ) from exc


def build_server() -> GracefulServer:
    """Create the uvicorn server for the current settings."""
    settings = load_settings()
    # Imported late so the application module sees the flag overrides.
    from api_service.src.main import app, health_state

    host, port = settings.get_listen_host_port()
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        timeout_keep_alive=int(settings.idle_timeout),
        timeout_graceful_shutdown=int(settings.shutdown_grace_period),
        access_log=False,
        log_config=None,
    )
    return GracefulServer(config, health_state)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse flags, start serving, block until shutdown."""
    args = build_parser().parse_args(argv)
    apply_overrides(args)

    try:
        server = build_server()
    except ConfigurationError as exc:
        log_exception(exc, scope=LogScope.LIFECYCLE)
        return 2

    logger.info("server_starting", host=server.config.host, port=server.config.port)
    server.run()
    if server.should_exit and not server.started:
        logger.critical("server_failed_to_start", host=server.config.host, port=server.config.port)
        return 1

    logger.info("server_exited")
    return 0


if __name__ == "__main__":
    sys.exit(main())
