"""Public entry point: ``parse(url)`` → :class:`ParseResult` or :class:`ErrorResult`.

Pipeline per page:

    fetch → validate → normalise → extract fields

The extractor rule is resolved once per ``parse`` call and reused for every
page of the article.  Failures on the first page become an
:class:`~clipper.errors.ErrorResult`; failures on later pages end pagination
and mark the result ``partial``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection
from typing import Optional, Union

import httpx
from bs4 import BeautifulSoup

from clipper.config import Settings, settings
from clipper.errors import ClipperError, ErrorResult
from clipper.extractors.generic.fields import excerpt_from_text, text_direction, word_count
from clipper.extractors.registry import default_registry
from clipper.extractors.resolver import Resolution, hostname, resolve_extractor
from clipper.extractors.root import extract_page
from clipper.extractors.rules import RuleRegistry
from clipper.models import ExtractionFields, PaginationState, ParseResult
from clipper.pagination import collect_all_pages, merge_pages
from clipper.resource.fetcher import build_client, check_url, fetch_resource, synthetic_response
from clipper.resource.normalizer import normalize

logger = logging.getLogger(__name__)


class _PageLoader:
    """Fetches and extracts pages of one article with a fixed rule and client."""

    def __init__(
        self,
        resolution: Resolution,
        config: Settings,
        client: httpx.AsyncClient,
    ) -> None:
        self.resolution = resolution
        self.config = config
        self.client = client

    async def __call__(
        self,
        url: str,
        visited: Collection[str] = (),
        page_number: int = 1,
        html: Optional[str] = None,
    ) -> ExtractionFields:
        if html is not None:
            response = synthetic_response(url, html)
        else:
            response = await fetch_resource(url, self.config, self.client)
        doc = normalize(response)
        return extract_page(
            doc,
            self.resolution,
            content_type=self.config.content_type,
            visited=visited,
            current_page=page_number,
        )


def _content_text(content: str, content_type: str) -> str:
    if content_type == "text":
        return content
    return BeautifulSoup(content, "html.parser").get_text(" ")


def assemble_result(
    url: str,
    first_page: ExtractionFields,
    state: Optional[PaginationState],
    content_type: str = "html",
) -> ParseResult:
    """Combine page-one fields with merged content and page counters."""
    if state is None:
        # First page only: estimate the total from pagination hints.
        rendered = 1
        total = max(first_page.total_pages_hint, 2 if first_page.next_page_url else 1)
        content = first_page.content
        pages = [first_page.content]
        pagination_error = None
    else:
        rendered = len(state.pages)
        pages = state.pages
        content = merge_pages(state.pages, content_type)
        pagination_error = state.error
        if state.next_page_url and not state.has_visited(state.next_page_url):
            total = max(rendered + 1, first_page.total_pages_hint)
        elif pagination_error:
            total = rendered + 1
        else:
            total = rendered

    text = _content_text(content, content_type)
    # Separator headings are left out so they do not tip the direction.
    direction_text = _content_text(" ".join(pages), content_type)
    return ParseResult(
        title=first_page.title,
        author=first_page.author,
        date_published=first_page.date_published,
        dek=first_page.dek,
        lead_image_url=first_page.lead_image_url,
        content=content,
        next_page_url=first_page.next_page_url,
        url=url,
        domain=hostname(url),
        excerpt=excerpt_from_text(text),
        word_count=word_count(text),
        direction=text_direction(
            f"{first_page.title or ''} {direction_text}", first_page.declared_direction
        ),
        total_pages=total,
        rendered_pages=rendered,
        partial=pagination_error is not None,
        pagination_error=pagination_error,
    )


async def _parse(
    url: str,
    html: Optional[str],
    config: Settings,
    registry: RuleRegistry,
    client: httpx.AsyncClient,
) -> ParseResult:
    resolution = resolve_extractor(url, registry)
    load_page = _PageLoader(resolution, config, client)

    first_page = await load_page(url, (url,), 1, html=html)
    state = None
    if config.fetch_all_pages:
        state = await collect_all_pages(
            first_page, load_page, config.max_pages, config.pagination_budget
        )
        logger.info("Parsed %s: %d page(s) rendered", url, len(state.pages))
    return assemble_result(url, first_page, state, config.content_type)


async def parse(
    url: str,
    html: Optional[str] = None,
    *,
    config: Optional[Settings] = None,
    registry: Optional[RuleRegistry] = None,
    fetch_all_pages: Optional[bool] = None,
    parse_non_2xx: Optional[bool] = None,
    headers: Optional[dict[str, str]] = None,
    max_pages: Optional[int] = None,
    content_type: Optional[str] = None,
) -> Union[ParseResult, ErrorResult]:
    """Extract the article at *url*.

    Args:
        url: Absolute http(s) URL of the article.
        html: Use this markup for the first page instead of fetching it.
        config: Base settings; defaults to the module singleton.
        registry: Custom rule registry; defaults to the bundled one.
        fetch_all_pages: Follow and merge next-page links.
        parse_non_2xx: Accept non-2xx responses as content.
        headers: Extra outbound headers (override the defaults).
        max_pages: Upper bound on pages rendered.
        content_type: ``"html"`` or ``"text"`` for the ``content`` field.

    Returns:
        A :class:`ParseResult`, or an :class:`ErrorResult` if the first page
        could not be fetched, validated, parsed or extracted.  Pipeline
        failures are never raised.
    """
    config = (config or settings).override(
        fetch_all_pages=fetch_all_pages,
        parse_non_2xx=parse_non_2xx,
        headers=headers,
        max_pages=max_pages,
        content_type=content_type,
    )
    registry = registry if registry is not None else default_registry

    try:
        url = check_url(url)
        async with build_client(config) as client:
            return await _parse(url, html, config, registry, client)
    except ClipperError as exc:
        logger.info("Could not parse %s: %s (%s)", url, exc.message, exc.kind.value)
        return ErrorResult.from_exception(exc)


def parse_sync(url: str, html: Optional[str] = None, **options) -> Union[ParseResult, ErrorResult]:
    """Blocking wrapper around :func:`parse` for synchronous callers."""
    return asyncio.run(parse(url, html, **options))
