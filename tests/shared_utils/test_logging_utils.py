"""
Tests for shared_utils.logging_utils.

Covers get_scoped_logger(), LogLevel enum, configure_logging() and
ContextualLogger.
"""

import logging
import sys
from unittest.mock import MagicMock, patch

import pytest

from shared_utils.constants import LogScope
from shared_utils.logging_utils import (
    ContextualLogger,
    LogLevel,
    configure_logging,
    get_scoped_logger,
)


# ---------------------------------------------------------------------------
# get_scoped_logger
# ---------------------------------------------------------------------------


class TestGetScopedLogger:
    def test_returns_bound_logger(self) -> None:
        logger = get_scoped_logger(LogScope.API)
        assert callable(getattr(logger, "info", None))
        assert callable(getattr(logger, "error", None))

    def test_scope_bound(self) -> None:
        with patch("shared_utils.logging_utils.structlog.get_logger") as mock_get:
            get_scoped_logger(LogScope.RESOLVER)
        mock_get.return_value.bind.assert_called_once_with(scope="document_resolver")

    def test_every_scope(self) -> None:
        for scope in (LogScope.API, LogScope.ADAPTER, LogScope.RESOLVER, LogScope.BARCODE):
            assert get_scoped_logger(scope) is not None


# ---------------------------------------------------------------------------
# LogLevel / configure_logging
# ---------------------------------------------------------------------------


class TestLogLevel:
    def test_values(self) -> None:
        assert [level.value for level in LogLevel] == [
            "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL",
        ]


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        level, handlers = root.level, list(root.handlers)
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    @pytest.mark.parametrize("name,level", [
        ("DEBUG", logging.DEBUG),
        ("warning", logging.WARNING),
        ("bogus", logging.INFO),
    ])
    def test_sets_root_level(self, name: str, level: int) -> None:
        configure_logging(name)
        assert logging.getLogger().level == level

    def test_writes_to_stdout(self) -> None:
        configure_logging("INFO")
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stdout


# ---------------------------------------------------------------------------
# ContextualLogger
# ---------------------------------------------------------------------------


class TestContextualLogger:
    @pytest.fixture()
    def ctx(self) -> ContextualLogger:
        ctx = ContextualLogger(scope=LogScope.API)
        ctx.logger = MagicMock()
        return ctx

    def test_scope_kept(self) -> None:
        assert ContextualLogger(scope=LogScope.MIDDLEWARE).scope == "middleware"

    @pytest.mark.parametrize("method", ["info", "debug", "warning", "error"])
    def test_forwards(self, ctx: ContextualLogger, method: str) -> None:
        getattr(ctx, method)("event_name", key="ABC123")
        getattr(ctx.logger, method).assert_called_once_with("event_name", key="ABC123")
