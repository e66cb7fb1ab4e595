"""Follow next-page links and gather every page of one article.

Pages are fetched strictly one after another: the URL of page N+1 is only
known once page N has been extracted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Collection
from typing import Optional

from clipper.errors import ClipperError
from clipper.models import ExtractionFields, PaginationState

logger = logging.getLogger(__name__)

# (url, visited urls, page number) -> extracted fields for that page
PageLoader = Callable[[str, Collection[str], int], Awaitable[ExtractionFields]]


async def collect_all_pages(
    first_page: ExtractionFields,
    load_page: PageLoader,
    max_pages: int,
    budget: Optional[float] = None,
) -> PaginationState:
    """Walk next-page links starting from *first_page*.

    Stops when there is no next link, the next link was already visited,
    *max_pages* pages have been rendered, or *budget* seconds have elapsed.
    A failure on a later page ends the walk and is recorded on
    ``state.error``; the pages gathered so far are kept.
    """
    state = PaginationState(base_url=first_page.url, max_pages=max(1, max_pages))
    state.visit(first_page.url)
    state.pages.append(first_page.content)
    state.current_page = 1
    state.next_page_url = first_page.next_page_url

    started = time.monotonic()
    while state.next_page_url:
        next_url = state.next_page_url
        if state.has_visited(next_url):
            logger.debug("Next page %s already visited; stopping", next_url)
            state.next_page_url = None
            break
        if state.current_page >= state.max_pages:
            logger.debug("Reached max_pages=%d; stopping", state.max_pages)
            break
        if budget is not None and time.monotonic() - started > budget:
            state.error = f"Pagination budget of {budget:.1f}s exhausted"
            logger.warning("%s after %d page(s) of %s", state.error, state.current_page, state.base_url)
            break

        state.visit(next_url)
        try:
            page = await load_page(next_url, tuple(state.visited_urls), state.current_page + 1)
        except ClipperError as exc:
            state.error = f"{exc.kind.value}: {exc.message}"
            logger.warning(
                "Stopping pagination of %s at page %d: %s",
                state.base_url, state.current_page + 1, state.error,
            )
            break

        state.current_page += 1
        state.pages.append(page.content)
        state.next_page_url = page.next_page_url

    return state


def merge_pages(pages: list[str], content_type: str = "html") -> str:
    """Concatenate page contents in visitation order with page separators."""
    if not pages:
        return ""
    merged = [pages[0]]
    for number, content in enumerate(pages[1:], start=2):
        if content_type == "text":
            merged.append(f"\n\nPage {number}\n\n{content}")
        else:
            merged.append(f"<hr><h4>Page {number}</h4>{content}")
    return "".join(merged)
