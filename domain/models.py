"""
Pure domain models for the attestation document service.

These models contain NO FTP or HTTP dependencies. They represent the core
concepts that flow through ports and services.
"""

from __future__ import annotations

from enum import Enum


class DocumentKind(str, Enum):
    """Kinds of documents kept in the cache directory."""

    PDF = "pdf"
    PNG = "png"

    @property
    def extension(self) -> str:
        """Filename suffix, dot included."""
        return f".{self.value}"

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]


_MEDIA_TYPES = {
    DocumentKind.PDF: "application/pdf",
    DocumentKind.PNG: "image/png",
}


class ResolutionStage(str, Enum):
    """Step of a document resolution, attached to logs and error context."""

    LOCAL_LOOKUP = "local_lookup"
    REMOTE_FETCH = "remote_fetch"
    MATERIALIZE = "materialize"
    REOPEN = "reopen"

