"""
FTP-backed archive client adapter.

Implements ArchiveClientPort with ftplib. Every retrieval opens its own
control connection (connect → login → RETR → QUIT); sessions are never
pooled or shared between requests.
"""

from __future__ import annotations

import ftplib
import tempfile
from typing import BinaryIO, Callable, Optional

from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import (
    ArchiveAuthError,
    ArchiveConnectError,
    BlobNotFoundError,
    TransferError,
)
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.ADAPTER)

# RFC 959: "Requested action not taken. File unavailable"
_FILE_UNAVAILABLE = "550"


class FtpArchiveClientAdapter:
    """FTP implementation of ArchiveClientPort.

    The blob is buffered into a ``SpooledTemporaryFile`` (in memory up to
    ``spool_max_bytes``, then on local disk) so the session can be closed
    before the stream is handed to the caller.
    """

    def __init__(
        self,
        host: str,
        user: str,
        password: str,
        port: int = Defaults.FTP_PORT,
        connect_timeout: float = Defaults.FTP_CONNECT_TIMEOUT,
        spool_max_bytes: int = Defaults.FTP_SPOOL_MAX_BYTES,
        ftp_factory: Optional[Callable[..., ftplib.FTP]] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self._password = password
        self.connect_timeout = connect_timeout
        self.spool_max_bytes = spool_max_bytes
        self._ftp_factory = ftp_factory or ftplib.FTP

    # ------------------------------------------------------------------
    # ArchiveClientPort implementation
    # ------------------------------------------------------------------

    def retrieve(self, blob_name: str) -> BinaryIO:
        """Download ``blob_name`` and return it as a rewound binary stream."""
        ftp = self._connect()
        try:
            self._login(ftp)
            logger.info("archive_retrieve_started", host=self.host, blob_name=blob_name)
            return self._download(ftp, blob_name)
        finally:
            self._disconnect(ftp)

    # ------------------------------------------------------------------
    # Session steps
    # ------------------------------------------------------------------

    def _connect(self) -> ftplib.FTP:
        ftp = self._ftp_factory(timeout=self.connect_timeout)
        try:
            ftp.connect(self.host, self.port, timeout=self.connect_timeout)
        except ftplib.all_errors as exc:
            ftp.close()
            logger.error(
                "archive_connect_failed",
                host=self.host,
                port=self.port,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise ArchiveConnectError(
                self.host, f"connect failed: {exc}", context={"port": self.port}
            ) from exc
        return ftp

    def _login(self, ftp: ftplib.FTP) -> None:
        try:
            ftp.login(self.user, self._password)
        except (ftplib.error_perm, ftplib.error_reply) as exc:
            logger.error("archive_auth_failed", host=self.host, user=self.user, error=str(exc))
            raise ArchiveAuthError(
                self.host, f"login rejected: {exc}", context={"user": self.user}
            ) from exc
        except ftplib.all_errors as exc:
            logger.error("archive_login_dropped", host=self.host, error=str(exc))
            raise ArchiveConnectError(self.host, f"connection lost during login: {exc}") from exc

    def _download(self, ftp: ftplib.FTP, blob_name: str) -> BinaryIO:
        buffer = tempfile.SpooledTemporaryFile(max_size=self.spool_max_bytes)
        try:
            ftp.retrbinary(f"RETR {blob_name}", buffer.write)
        except ftplib.error_perm as exc:
            buffer.close()
            if str(exc).startswith(_FILE_UNAVAILABLE):
                logger.info("archive_blob_not_found", host=self.host, blob_name=blob_name)
                raise BlobNotFoundError(blob_name, context={"reply": str(exc)}) from exc
            logger.error("archive_retrieve_rejected", host=self.host, blob_name=blob_name, error=str(exc))
            raise TransferError(
                self.host, f"RETR {blob_name} rejected: {exc}", context={"blob_name": blob_name}
            ) from exc
        except ftplib.all_errors as exc:
            buffer.close()
            logger.error(
                "archive_transfer_failed",
                host=self.host,
                blob_name=blob_name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise TransferError(
                self.host, f"RETR {blob_name} failed: {exc}", context={"blob_name": blob_name}
            ) from exc

        size = buffer.tell()
        buffer.seek(0)
        logger.info("archive_blob_retrieved", host=self.host, blob_name=blob_name, size_bytes=size)
        return buffer

    def _disconnect(self, ftp: ftplib.FTP) -> None:
        """QUIT the session; fall back to closing the socket."""
        try:
            ftp.quit()
        except ftplib.all_errors as exc:
            logger.warning("archive_quit_failed", host=self.host, error=str(exc))
            ftp.close()
