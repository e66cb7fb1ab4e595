"""Find the "next page" link of a paginated article by scoring candidate anchors."""

from __future__ import annotations

import logging
import re
from collections.abc import Collection
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urldefrag, urlsplit, urlunsplit

from bs4 import BeautifulSoup, Tag

from clipper.extractors.generic.scoring import class_and_id, node_text
from clipper.extractors.resolver import base_domain

logger = logging.getLogger(__name__)

MIN_NEXT_PAGE_SCORE = 50

NEXT_LINK_TEXT_RE = re.compile(r"(next|weiter|continue|more|>([^|]|$)|»([^|]|$)|›)", re.IGNORECASE)
PREV_LINK_TEXT_RE = re.compile(r"(prev|earl|old|new|<|«|‹)", re.IGNORECASE)
CAP_LINK_TEXT_RE = re.compile(r"(first|last|end)", re.IGNORECASE)
PAGE_HINT_RE = re.compile(r"pag(e|ing|inat)", re.IGNORECASE)
PAGE_IN_HREF_RE = re.compile(r"(page|paging|p|pg)[=/_-]?\d{1,3}(\D|$)|/\d{1,3}/?$", re.IGNORECASE)
NEGATIVE_PARENT_RE = re.compile(
    r"comment|combx|contact|foot|footer|footnote|masthead|media|meta|outbrain|promo|"
    r"related|shoutbox|sponsor|utility|tags|widget",
    re.IGNORECASE,
)
EXTRANEOUS_LINK_HINTS_RE = re.compile(
    r"print|archive|comment|discuss|e-mail|email|share|reply|all|login|sign|single|adx|"
    r"entry-unrelated",
    re.IGNORECASE,
)

_PAGE_SEGMENT_RES = (
    re.compile(r"^\d{1,3}$"),
    re.compile(r"^(?:page|p|pg)[-_]?\d{1,3}$", re.IGNORECASE),
    re.compile(r"^(?:page|p|pg)$", re.IGNORECASE),
)
_PAGE_QUERY_KEYS = frozenset({"page", "p", "pg", "paged", "pagenum", "pagination"})
_DIGIT_RE = re.compile(r"\d")
_MAX_LINK_TEXT = 25
_MAX_PARENT_DEPTH = 4


def article_base_url(url: str) -> str:
    """Strip page-number path segments and query parameters from *url*.

    ``http://x.com/story/2/`` and ``http://x.com/story/?page=3`` both reduce
    to ``http://x.com/story/``.
    """
    parts = urlsplit(urldefrag(url)[0])
    segments = parts.path.split("/")
    trailing_slash = parts.path.endswith("/")
    kept = [s for s in segments if s]
    while kept and any(p.match(kept[-1]) for p in _PAGE_SEGMENT_RES):
        kept.pop()
    path = "/" + "/".join(kept)
    if kept and (trailing_slash or len(kept) < len([s for s in segments if s])):
        path += "/"
    query = urlencode([(k, v) for k, v in parse_qsl(parts.query) if k.lower() not in _PAGE_QUERY_KEYS])
    return urlunsplit((parts.scheme, parts.netloc, path, query, ""))


def _normalize_href(href: str) -> str:
    return urldefrag(href.strip())[0]


def _same_site(href: str, url: str) -> bool:
    return base_domain(urlsplit(href).hostname or "") == base_domain(urlsplit(url).hostname or "")


def _past_base(href: str, base_url: str) -> str:
    """Part of *href* after the article base, keeping the leading slash."""
    if not href.startswith(base_url):
        return href
    return href[len(base_url.rstrip("/")):]


def _page_number(text: str) -> Optional[int]:
    text = text.strip()
    return int(text) if text.isdigit() and len(text) <= 3 else None


def _should_score(href: str, text: str, article_url: str, base_url: str, visited: Collection[str]) -> bool:
    if not href.startswith(("http://", "https://")):
        return False
    stripped = href.rstrip("/")
    if stripped in (article_url.rstrip("/"), base_url.rstrip("/")):
        return False
    if href in visited or stripped in {v.rstrip("/") for v in visited}:
        return False
    if not _same_site(href, article_url):
        return False
    if len(text) > _MAX_LINK_TEXT:
        return False
    # Page links carry a number somewhere past the article's own URL.
    return bool(_DIGIT_RE.search(_past_base(href, base_url)))


def _parent_hints(link: Tag) -> tuple[bool, bool]:
    positive = negative = False
    node = link
    for _ in range(_MAX_PARENT_DEPTH):
        if not isinstance(node, Tag) or node.name in ("body", "html", "[document]"):
            break
        hints = class_and_id(node)
        if hints:
            positive = positive or bool(PAGE_HINT_RE.search(hints))
            negative = negative or bool(NEGATIVE_PARENT_RE.search(hints))
        node = node.parent
    return positive, negative


def score_link(
    href: str,
    text: str,
    link: Tag,
    base_url: str,
    current_page: int = 1,
) -> float:
    score = 0.0
    if not href.startswith(base_url):
        score -= 25

    if NEXT_LINK_TEXT_RE.search(text):
        score += 50
    if PREV_LINK_TEXT_RE.search(text):
        score -= 200
    if CAP_LINK_TEXT_RE.search(text):
        score -= 65
    if EXTRANEOUS_LINK_HINTS_RE.search(text) or EXTRANEOUS_LINK_HINTS_RE.search(_past_base(href, base_url)):
        score -= 25

    number = _page_number(text)
    if number is not None:
        if number <= current_page:
            score -= 50
        elif number == current_page + 1:
            score += 30
        else:
            score += max(0, 10 - number)

    positive, negative = _parent_hints(link)
    if positive:
        score += 25
    if negative:
        score -= 25

    if PAGE_IN_HREF_RE.search(_past_base(href, base_url)):
        score += 25

    return score


def extract_next_page_url(
    soup: BeautifulSoup,
    article_url: str,
    base_url: Optional[str] = None,
    visited: Collection[str] = (),
    current_page: int = 1,
) -> Optional[str]:
    """Return the most likely next-page URL, or ``None`` if no link scores high enough."""
    base_url = base_url or article_base_url(article_url)

    # Several anchors may point at the same page ("2", "Next »"); score them together.
    candidates: dict[str, tuple[Tag, list[str]]] = {}
    for link in soup.find_all("a", href=True):
        href = _normalize_href(link["href"])
        text = node_text(link)
        if not _should_score(href, text, article_url, base_url, visited):
            continue
        if href in candidates:
            candidates[href][1].append(text)
        else:
            candidates[href] = (link, [text])

    best: Optional[str] = None
    best_score = float(MIN_NEXT_PAGE_SCORE) - 1e-9
    for href, (link, texts) in candidates.items():
        score = score_link(href, " | ".join(texts), link, base_url, current_page)
        logger.debug("next-page candidate %s scored %.1f", href, score)
        if score > best_score:
            best, best_score = href, score
    return best


def estimate_total_pages(soup: BeautifulSoup, article_url: str) -> int:
    """Largest page number linked from pagination-looking anchors, at least 1."""
    base_url = article_base_url(article_url)
    total = 1
    for link in soup.find_all("a", href=True):
        number = _page_number(node_text(link))
        href = _normalize_href(link["href"])
        if number is None or not href.startswith(base_url) or not _same_site(href, article_url):
            continue
        total = max(total, number)
    return total
