"""
Barcode label service: encodes a document key as a Code 128 barcode and
publishes it as a fixed-size PNG in the document cache.

Rendering is a pure function of the key: identical keys give bit-identical
PNG bytes.
"""

from __future__ import annotations

import io
from pathlib import Path

from barcode import Code128
from barcode.errors import BarcodeError
from PIL import Image

from domain.models import DocumentKind
from ports.document_cache import DocumentCachePort
from shared_utils.constants import BarcodeDefaults, LogScope
from shared_utils.error_handler import BarcodeEncodingError
from shared_utils.logging_utils import get_scoped_logger

logger = get_scoped_logger(LogScope.BARCODE)


def encode_modules(key: str) -> str:
    """Code 128 module pattern for ``key`` as a string of ``0``/``1``."""
    try:
        return Code128(key).build()[0]
    except (BarcodeError, KeyError) as exc:
        raise BarcodeEncodingError(
            "key cannot be encoded as Code 128", context={"key": key}
        ) from exc


def render_png(
    modules: str,
    width: int = BarcodeDefaults.WIDTH,
    height: int = BarcodeDefaults.HEIGHT,
) -> bytes:
    """Rasterize a 1D module pattern to a ``width`` x ``height`` grayscale PNG.

    Each module is scaled by the largest integer factor that fits, the bars
    are centered with white padding and stretched to the full height.

    Raises:
        BarcodeEncodingError: If the pattern has more modules than pixels.
    """
    factor = width // len(modules)
    if factor == 0:
        raise BarcodeEncodingError(
            f"barcode needs {len(modules)} pixels, image is {width} wide",
            context={"modules": len(modules), "width": width},
        )
    padding = (width - len(modules) * factor) // 2

    row = bytearray([BarcodeDefaults.SPACE]) * width
    bar = bytes([BarcodeDefaults.BAR]) * factor
    for index, module in enumerate(modules):
        if module == "1":
            start = padding + index * factor
            row[start:start + factor] = bar

    image = Image.frombytes("L", (width, height), bytes(row) * height)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class BarcodeService:
    """Generates barcode labels into the document cache."""

    def __init__(self, cache: DocumentCachePort) -> None:
        self._cache = cache

    def render(self, key: str) -> bytes:
        """Encode ``key`` and return the PNG bytes."""
        return render_png(encode_modules(key))

    def generate(self, key: str, request_id: str = "unknown") -> Path:
        """Render ``key`` and publish it as ``<key>.png``.

        Returns:
            Path of the published PNG.

        Raises:
            BarcodeEncodingError: The key cannot be rendered.
            CacheWriteError: The PNG could not be written.
        """
        png = self.render(key)
        filename = f"{key}{DocumentKind.PNG.extension}"
        path = self._cache.materialize(filename, io.BytesIO(png))
        logger.info(
            "barcode_generated",
            request_id=request_id,
            key=key,
            path=str(path),
            size_bytes=len(png),
        )
        return path
