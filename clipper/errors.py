"""Error taxonomy for the extraction pipeline.

Components raise :class:`ClipperError` subclasses internally.  The public
entry point (:func:`clipper.parser.parse`) converts them into
:class:`ErrorResult` values, so callers branch on ``result.error`` rather
than catching exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    BAD_URL = "BadUrl"
    FETCH = "FetchError"
    VALIDATION = "ValidationError"
    PARSE = "ParseError"
    EXTRACTION = "ExtractionError"


class ClipperError(Exception):
    """Base class for every pipeline failure."""

    kind: ErrorKind = ErrorKind.EXTRACTION

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url


class BadUrlError(ClipperError):
    """The input does not parse as an http(s) URL with a host."""

    kind = ErrorKind.BAD_URL


class FetchError(ClipperError):
    """Transport failure (connection, DNS, timeout) or a response with no status."""

    kind = ErrorKind.FETCH

    def __init__(
        self, message: str, *, url: str | None = None, cause: BaseException | None = None
    ) -> None:
        super().__init__(message, url=url)
        self.cause = cause


class ValidationError(ClipperError):
    """Non-2xx without opt-in, disallowed content type, or oversized body."""

    kind = ErrorKind.VALIDATION


class ParseError(ClipperError):
    """The body could not be decoded or parsed into a document tree."""

    kind = ErrorKind.PARSE


class ExtractionError(ClipperError):
    """A custom rule raised, or yielded nothing for a required field."""

    kind = ErrorKind.EXTRACTION


@dataclass(frozen=True)
class ErrorResult:
    """Value returned by ``parse`` when extraction cannot proceed."""

    message: str
    error_message: ErrorKind
    url: str | None = None
    error: bool = True

    @classmethod
    def from_exception(cls, exc: ClipperError) -> "ErrorResult":
        return cls(message=exc.message, error_message=exc.kind, url=exc.url)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": True,
            "message": self.message,
            "error_message": self.error_message.value,
            "url": self.url,
        }


__all__ = [
    "ErrorKind",
    "ClipperError",
    "BadUrlError",
    "FetchError",
    "ValidationError",
    "ParseError",
    "ExtractionError",
    "ErrorResult",
]
