"""Result models for the extraction pipeline.

These are plain dataclasses.  :class:`ParseResult` is frozen and serialises
to the stable dictionary shape consumed downstream via :meth:`to_dict`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ExtractionFields:
    """Fields extracted from a single page."""

    url: str
    title: Optional[str] = None
    author: Optional[str] = None
    date_published: Optional[str] = None
    dek: Optional[str] = None
    lead_image_url: Optional[str] = None
    content: str = ""
    excerpt: str = ""
    direction: str = "ltr"
    declared_direction: Optional[str] = None
    next_page_url: Optional[str] = None
    word_count: int = 0
    total_pages_hint: int = 1


@dataclass
class PaginationState:
    """Traversal bookkeeping for one multi-page parse."""

    base_url: str
    max_pages: int
    visited_urls: list[str] = field(default_factory=list)
    pages: list[str] = field(default_factory=list)
    current_page: int = 0
    next_page_url: Optional[str] = None
    error: Optional[str] = None

    def visit(self, url: str) -> None:
        if url not in self.visited_urls:
            self.visited_urls.append(url)

    def has_visited(self, url: str) -> bool:
        stripped = url.rstrip("/")
        return any(seen.rstrip("/") == stripped for seen in self.visited_urls)


@dataclass(frozen=True)
class ParseResult:
    title: Optional[str]
    author: Optional[str]
    date_published: Optional[str]
    dek: Optional[str]
    lead_image_url: Optional[str]
    content: str
    next_page_url: Optional[str]
    url: str
    domain: str
    excerpt: str
    word_count: int
    direction: str
    total_pages: int
    rendered_pages: int
    partial: bool = False
    pagination_error: Optional[str] = None
    error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "date_published": self.date_published,
            "dek": self.dek,
            "lead_image_url": self.lead_image_url,
            "content": self.content,
            "next_page_url": self.next_page_url,
            "url": self.url,
            "domain": self.domain,
            "excerpt": self.excerpt,
            "word_count": self.word_count,
            "direction": self.direction,
            "total_pages": self.total_pages,
            "rendered_pages": self.rendered_pages,
            "partial": self.partial,
            "pagination_error": self.pagination_error,
        }
