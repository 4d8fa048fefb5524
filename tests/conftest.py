"""
Root conftest.py: shared fixtures for the entire test suite.

Guidelines:
    • No __init__.py in test sub-directories (avoids shadowing root packages).
    • pytest.ini_options lives in pyproject.toml with pythonpath=["."].
    • Markers: integration.
"""

import io
import threading
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from adapters.local_document_cache import LocalDocumentCacheAdapter
from shared_utils.error_handler import BlobNotFoundError


# ---------------------------------------------------------------------------
# Marker registration
# ---------------------------------------------------------------------------

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as using real sockets")


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------

SAMPLE_PDF_BYTES = b"%PDF-1.4\n" + b"attestation body " * 4096 + b"\n%%EOF\n"


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """A few dozen KiB of PDF-looking bytes."""
    return SAMPLE_PDF_BYTES


# ---------------------------------------------------------------------------
# Archive fakes
# ---------------------------------------------------------------------------

class FakeArchive:
    """In-memory ArchiveClientPort recording every retrieval.

    ``gate`` (when set) blocks each retrieval until released, which lets
    tests force two resolutions to miss the cache at the same time.
    """

    def __init__(self, blobs: Optional[Dict[str, bytes]] = None) -> None:
        self.blobs: Dict[str, bytes] = dict(blobs or {})
        self.calls: List[str] = []
        self.gate: Optional[threading.Barrier] = None
        self._lock = threading.Lock()

    def retrieve(self, blob_name: str) -> BinaryIO:
        with self._lock:
            self.calls.append(blob_name)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if blob_name not in self.blobs:
            raise BlobNotFoundError(blob_name)
        return io.BytesIO(self.blobs[blob_name])


@pytest.fixture()
def fake_archive(sample_pdf_bytes: bytes) -> FakeArchive:
    """Archive holding ``ABC123.pdf`` only."""
    return FakeArchive({"ABC123.pdf": sample_pdf_bytes})


@pytest.fixture()
def cache_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "documents"
    directory.mkdir()
    return directory


@pytest.fixture()
def document_cache(cache_dir: Path) -> LocalDocumentCacheAdapter:
    return LocalDocumentCacheAdapter(cache_dir)


# ---------------------------------------------------------------------------
# DI container mock
# ---------------------------------------------------------------------------

@pytest.fixture()
def mock_container() -> MagicMock:
    """DI container exposing a mock resolver and barcode service."""
    container = MagicMock()
    container.get_document_resolver.return_value = MagicMock()
    container.get_barcode_service.return_value = MagicMock()
    return container
