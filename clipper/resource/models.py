"""Data models for the resource layer (fetch + normalise)."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
from bs4 import BeautifulSoup


@dataclass
class FetchResult:
    """The raw HTTP response for a single URL fetch.

    ``headers`` is an :class:`httpx.Headers`, so lookups are case-insensitive.
    ``status_code`` is ``None`` only for synthetic responses describing a
    transport failure.
    """

    url: str
    status_code: int | None
    status_message: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""
    error: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300


@dataclass
class ParsedDocument:
    """A decoded, cleaned DOM tree for one page."""

    url: str
    encoding: str
    soup: BeautifulSoup
