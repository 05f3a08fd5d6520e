"""Domain error taxonomy for the export pipeline and response endpoints.

Each error carries the HTTP status it surfaces as. Handlers in
`census_service.http.problem` render them as JSON error payloads; the core
never retries on any of them.
"""

from __future__ import annotations


class CensusError(Exception):
    """Base class for errors surfaced to HTTP callers."""

    status_code: int = 500
    title: str = "Internal Server Error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.title)
        self.message = message or self.title


class ValidationError(CensusError):
    """Bad or missing request parameters (e.g. an unparseable id list)."""

    status_code = 400
    title = "Invalid Request"


class NotFoundError(CensusError):
    status_code = 404
    title = "Not Found"


class ParseError(CensusError):
    """Stored answers text could not be decoded.

    Recovered inside answer normalization by substituting an empty mapping;
    never reaches an HTTP handler.
    """

    status_code = 500
    title = "Unparseable Answers"


class SerializationError(CensusError):
    """The document writer failed to produce bytes."""

    title = "Document Serialization Failed"


class PackError(CensusError):
    """The archive packer failed to produce bytes."""

    title = "Archive Packing Failed"


class StoreError(CensusError):
    """Read or write failure reported by the answer store."""

    title = "Store Failure"


__all__ = [
    "CensusError",
    "ValidationError",
    "NotFoundError",
    "ParseError",
    "SerializationError",
    "PackError",
    "StoreError",
]
