"""
Tests for process lifecycle (health flag, graceful server) and the
command-line entrypoint.
"""

import argparse
import signal
import threading
from unittest.mock import MagicMock, patch

import pytest
import uvicorn

from api_service.src.lifecycle import GracefulServer, HealthState
from api_service.src.server import apply_overrides, build_parser, build_server, load_settings, main
from shared_utils.config_loader import get_settings
from shared_utils.error_handler import ConfigurationError


async def _dummy_app(scope, receive, send):  # pragma: no cover
    pass


# ---------------------------------------------------------------------------
# HealthState
# ---------------------------------------------------------------------------

class TestHealthState:
    def test_starts_unhealthy(self):
        assert HealthState().is_healthy is False

    def test_transitions(self):
        health = HealthState()
        health.mark_healthy()
        assert health.is_healthy is True
        health.mark_unhealthy()
        assert health.is_healthy is False

    def test_concurrent_toggles(self):
        health = HealthState()

        def _toggle():
            for _ in range(1000):
                health.mark_healthy()
                health.mark_unhealthy()

        threads = [threading.Thread(target=_toggle) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert health.is_healthy is False


# ---------------------------------------------------------------------------
# GracefulServer
# ---------------------------------------------------------------------------

class TestGracefulServer:
    def test_exit_signal_clears_health_first(self):
        health = HealthState()
        health.mark_healthy()
        server = GracefulServer(uvicorn.Config(_dummy_app), health)

        server.handle_exit(signal.SIGTERM, None)

        assert health.is_healthy is False
        assert server.should_exit is True

    def test_second_signal_forces_exit(self):
        health = HealthState()
        server = GracefulServer(uvicorn.Config(_dummy_app), health)

        server.handle_exit(signal.SIGINT, None)
        server.handle_exit(signal.SIGINT, None)

        assert server.force_exit is True

    def test_shutdown_logged_once(self):
        health = HealthState()
        health.mark_healthy()
        server = GracefulServer(uvicorn.Config(_dummy_app), health)

        with patch("api_service.src.lifecycle.logger") as mock_logger:
            server.handle_exit(signal.SIGTERM, None)
            server.handle_exit(signal.SIGTERM, None)

        mock_logger.info.assert_called_once()
        assert mock_logger.info.call_args[0][0] == "server_shutting_down"


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------

_FLAG_ENV = ("LISTEN_ADDR", "DOCUMENT_DIRECTORY", "FTP_HOST", "FTP_USER", "FTP_PASSWORD", "LOG_LEVEL")


@pytest.fixture()
def clean_env(monkeypatch):
    for name in _FLAG_ENV:
        # setenv first so teardown restores the original state even when
        # apply_overrides writes os.environ directly
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestParser:
    def test_defaults_are_unset(self):
        args = build_parser().parse_args([])
        assert vars(args) == {
            "listen_addr": None,
            "directory": None,
            "srv_ftp": None,
            "user_ftp": None,
            "pwd_ftp": None,
            "log_level": None,
        }

    def test_long_flags(self):
        args = build_parser().parse_args([
            "--listen-addr", "127.0.0.1:8080",
            "--directory", "/data/pdf",
            "--srv-ftp", "archive.local",
            "--user-ftp", "reader",
            "--pwd-ftp", "secret",
            "--log-level", "DEBUG",
        ])
        assert args.listen_addr == "127.0.0.1:8080"
        assert args.directory == "/data/pdf"
        assert args.srv_ftp == "archive.local"
        assert args.user_ftp == "reader"
        assert args.pwd_ftp == "secret"
        assert args.log_level == "DEBUG"

    def test_single_dash_spellings(self):
        args = build_parser().parse_args([
            "-listen-addr", ":6000",
            "-directory", "/srv",
            "-srvFtp", "ftp.example",
            "-userFtp", "u",
            "-pwdFtp", "p",
        ])
        assert (args.listen_addr, args.directory, args.srv_ftp, args.user_ftp, args.pwd_ftp) == (
            ":6000", "/srv", "ftp.example", "u", "p"
        )


class TestApplyOverrides:
    def test_flags_become_settings(self, clean_env, tmp_path):
        args = build_parser().parse_args([
            "--listen-addr", "127.0.0.1:8080",
            "--directory", str(tmp_path),
            "--srv-ftp", "archive.local",
        ])

        applied = apply_overrides(args)
        settings = get_settings()

        assert applied == {
            "LISTEN_ADDR": "127.0.0.1:8080",
            "DOCUMENT_DIRECTORY": str(tmp_path),
            "FTP_HOST": "archive.local",
        }
        assert settings.get_listen_host_port() == ("127.0.0.1", 8080)
        assert settings.document_directory == tmp_path
        assert settings.ftp_host == "archive.local"

    def test_no_flags_keeps_environment(self, clean_env):
        clean_env.setenv("FTP_HOST", "from-env")

        applied = apply_overrides(argparse.Namespace())

        assert applied == {}
        assert get_settings().ftp_host == "from-env"


class TestBuildServer:
    def test_server_uses_settings(self, clean_env):
        clean_env.setenv("LISTEN_ADDR", "127.0.0.1:5050")

        server = build_server()

        assert isinstance(server, GracefulServer)
        assert server.config.host == "127.0.0.1"
        assert server.config.port == 5050
        assert server.config.timeout_keep_alive == 15
        assert server.config.timeout_graceful_shutdown == 30

    def test_main_reports_startup_failure(self, clean_env):
        server = MagicMock()
        server.should_exit = True
        server.started = False
        with patch("api_service.src.server.build_server", return_value=server):
            assert main([]) == 1
        server.run.assert_called_once()

    def test_main_clean_exit(self, clean_env):
        server = MagicMock()
        server.should_exit = True
        server.started = True
        with patch("api_service.src.server.build_server", return_value=server):
            assert main([]) == 0

    def test_main_rejects_invalid_settings(self, clean_env):
        with patch("api_service.src.server.log_exception") as mock_log:
            assert main(["--listen-addr", "nowhere"]) == 2
        assert isinstance(mock_log.call_args[0][0], ConfigurationError)

    def test_load_settings_wraps_validation_errors(self, clean_env):
        clean_env.setenv("FTP_PORT", "70000")
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()
        assert any("ftp_port" in msg for msg in exc_info.value.context["errors"])
