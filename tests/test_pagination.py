"""Tests for clipper.pagination

A fake page loader stands in for fetch + extract: it serves canned
ExtractionFields keyed by URL and records every request it receives.
"""

from __future__ import annotations

from collections.abc import Collection
from unittest.mock import patch

from clipper.errors import FetchError, ValidationError
from clipper.models import ExtractionFields
from clipper.pagination import collect_all_pages, merge_pages

BASE = "https://example.com/story/"


def _page(url: str, content: str, next_url: str | None = None) -> ExtractionFields:
    return ExtractionFields(url=url, content=content, next_page_url=next_url)


class FakeLoader:
    def __init__(self, pages: dict[str, ExtractionFields | Exception]) -> None:
        self.pages = pages
        self.calls: list[tuple[str, tuple[str, ...], int]] = []

    async def __call__(self, url: str, visited: Collection[str], page_number: int) -> ExtractionFields:
        self.calls.append((url, tuple(visited), page_number))
        result = self.pages[url]
        if isinstance(result, Exception):
            raise result
        return result


# ---------------------------------------------------------------------------
# collect_all_pages
# ---------------------------------------------------------------------------

class TestCollectAllPages:
    async def test_single_page(self) -> None:
        loader = FakeLoader({})
        state = await collect_all_pages(_page(BASE, "<p>one</p>"), loader, max_pages=25)

        assert state.pages == ["<p>one</p>"]
        assert state.current_page == 1
        assert state.next_page_url is None
        assert state.error is None
        assert loader.calls == []

    async def test_follows_links_in_order(self) -> None:
        loader = FakeLoader({
            f"{BASE}2": _page(f"{BASE}2", "<p>two</p>", f"{BASE}3"),
            f"{BASE}3": _page(f"{BASE}3", "<p>three</p>"),
        })
        state = await collect_all_pages(_page(BASE, "<p>one</p>", f"{BASE}2"), loader, max_pages=25)

        assert state.pages == ["<p>one</p>", "<p>two</p>", "<p>three</p>"]
        assert state.visited_urls == [BASE, f"{BASE}2", f"{BASE}3"]
        assert [number for _, _, number in loader.calls] == [2, 3]
        # Each loader call already knows about the page being fetched.
        assert loader.calls[1][1] == (BASE, f"{BASE}2", f"{BASE}3")

    async def test_cycle_stops_without_refetching(self) -> None:
        loader = FakeLoader({
            f"{BASE}2": _page(f"{BASE}2", "<p>two</p>", BASE),
        })
        state = await collect_all_pages(_page(BASE, "<p>one</p>", f"{BASE}2"), loader, max_pages=25)

        assert len(state.pages) == 2
        assert len(loader.calls) == 1
        assert state.next_page_url is None
        assert state.error is None

    async def test_trailing_slash_variant_counts_as_visited(self) -> None:
        loader = FakeLoader({
            f"{BASE}2": _page(f"{BASE}2", "<p>two</p>", BASE.rstrip("/")),
        })
        state = await collect_all_pages(_page(BASE, "<p>one</p>", f"{BASE}2"), loader, max_pages=25)
        assert len(loader.calls) == 1
        assert len(state.pages) == 2

    async def test_max_pages_bounds_rendering(self) -> None:
        pages = {f"{BASE}{n}": _page(f"{BASE}{n}", f"<p>{n}</p>", f"{BASE}{n + 1}") for n in range(2, 50)}
        loader = FakeLoader(pages)

        state = await collect_all_pages(_page(BASE, "<p>1</p>", f"{BASE}2"), loader, max_pages=3)

        assert len(state.pages) == 3
        assert len(loader.calls) == 2
        assert state.next_page_url == f"{BASE}4"

    async def test_max_pages_of_one_renders_only_first(self) -> None:
        loader = FakeLoader({})
        state = await collect_all_pages(_page(BASE, "<p>1</p>", f"{BASE}2"), loader, max_pages=1)
        assert state.pages == ["<p>1</p>"]
        assert loader.calls == []

    async def test_later_page_failure_keeps_earlier_pages(self) -> None:
        loader = FakeLoader({
            f"{BASE}2": _page(f"{BASE}2", "<p>two</p>", f"{BASE}3"),
            f"{BASE}3": ValidationError("Resource returned a response status code of 500", url=f"{BASE}3"),
        })
        state = await collect_all_pages(_page(BASE, "<p>one</p>", f"{BASE}2"), loader, max_pages=25)

        assert state.pages == ["<p>one</p>", "<p>two</p>"]
        assert state.error == "ValidationError: Resource returned a response status code of 500"
        assert state.next_page_url == f"{BASE}3"

    async def test_transport_failure_recorded(self) -> None:
        loader = FakeLoader({f"{BASE}2": FetchError("Unable to fetch content", url=f"{BASE}2")})
        state = await collect_all_pages(_page(BASE, "<p>one</p>", f"{BASE}2"), loader, max_pages=25)

        assert state.pages == ["<p>one</p>"]
        assert state.error.startswith("FetchError:")

    async def test_budget_exhausted(self) -> None:
        loader = FakeLoader({
            f"{BASE}2": _page(f"{BASE}2", "<p>two</p>", f"{BASE}3"),
            f"{BASE}3": _page(f"{BASE}3", "<p>three</p>"),
        })
        with patch("clipper.pagination.time") as clock:
            # start, check before page 2, check before page 3
            clock.monotonic.side_effect = [0.0, 1.0, 10.0]
            state = await collect_all_pages(
                _page(BASE, "<p>one</p>", f"{BASE}2"), loader, max_pages=25, budget=5.0
            )

        assert state.pages == ["<p>one</p>", "<p>two</p>"]
        assert "budget" in state.error


# ---------------------------------------------------------------------------
# merge_pages
# ---------------------------------------------------------------------------

class TestMergePages:
    def test_html_separators(self) -> None:
        merged = merge_pages(["<div>a</div>", "<div>b</div>", "<div>c</div>"])
        assert merged == "<div>a</div><hr><h4>Page 2</h4><div>b</div><hr><h4>Page 3</h4><div>c</div>"

    def test_text_separators(self) -> None:
        assert merge_pages(["a", "b"], "text") == "a\n\nPage 2\n\nb"

    def test_single_and_empty(self) -> None:
        assert merge_pages(["<div>a</div>"]) == "<div>a</div>"
        assert merge_pages([]) == ""
