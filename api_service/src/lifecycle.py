"""
Process lifecycle: the health flag and a uvicorn server that flips it.

The flag is set when the application starts serving and cleared as soon as a
termination signal arrives, before uvicorn begins draining in-flight
requests, so health checks fail for the whole drain window.
"""

from __future__ import annotations

import threading
from types import FrameType
from typing import Optional

import uvicorn

from shared_utils.constants import LogScope
from shared_utils.logging_utils import get_scoped_logger

logger = get_scoped_logger(LogScope.LIFECYCLE)


class HealthState:
    """Process-wide healthy/unhealthy flag with guarded load and store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._healthy = False

    @property
    def is_healthy(self) -> bool:
        with self._lock:
            return self._healthy

    def mark_healthy(self) -> None:
        with self._lock:
            self._healthy = True

    def mark_unhealthy(self) -> None:
        with self._lock:
            self._healthy = False


class GracefulServer(uvicorn.Server):
    """uvicorn server that marks the process unhealthy when shutdown begins.

    Draining in-flight requests is bounded by the config's
    ``timeout_graceful_shutdown``.
    """

    def __init__(self, config: uvicorn.Config, health: HealthState) -> None:
        super().__init__(config)
        self._health = health

    def handle_exit(self, sig: int, frame: Optional[FrameType]) -> None:
        if self._health.is_healthy:
            logger.info("server_shutting_down", signal=sig)
        self._health.mark_unhealthy()
        super().handle_exit(sig, frame)
