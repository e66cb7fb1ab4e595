"""Generic heuristics and cleaners for the non-content article fields.

Each ``extract_*`` function looks at a :class:`ParsedDocument` (and, for the
derived fields, the extracted content root) and returns a cleaned value or
``None``.  The matching ``clean_*`` functions are shared with the custom-rule
path so both produce values in the same shape.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import urlsplit

import trafilatura
from bs4 import BeautifulSoup, Tag
from dateutil import parser as date_parser

from clipper.extractors.generic.scoring import node_text, normalize_spaces
from clipper.extractors.resolver import base_domain
from clipper.resource.models import ParsedDocument

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def meta_content(soup: BeautifulSoup, names: Iterable[str]) -> Optional[str]:
    """Return the first non-empty ``<meta>`` value among *names* (name/property/itemprop)."""
    index: dict[str, str] = {}
    for meta in soup.find_all("meta"):
        value = meta.get("content") or meta.get("value")
        if not value or not value.strip():
            continue
        for attr in ("name", "property", "itemprop"):
            key = meta.get(attr)
            if key:
                index.setdefault(key.strip().lower(), value.strip())
    for name in names:
        if name in index:
            return index[name]
    return None


def first_selector_text(soup: BeautifulSoup, selectors: Iterable[str], max_length: int = 0) -> Optional[str]:
    """Text of the first selector that matches exactly one node."""
    for selector in selectors:
        nodes = soup.select(selector)
        if len(nodes) != 1:
            continue
        text = node_text(nodes[0])
        if text and (not max_length or len(text) <= max_length):
            return text
    return None


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

TITLE_META_TAGS = ("og:title", "twitter:title", "hdl", "tweetmeme-title", "title", "headline")
TITLE_SELECTORS = (".entry-title", ".post-title", "h1.title", "h1.headline", "article h1", "h1")

_TITLE_SPLIT_RE = re.compile(r"\s+(?:\||-|–|—|:|»|·)\s+")


def _loose(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def _matches_domain(part: str, domain: str) -> bool:
    loose = _loose(part)
    return bool(loose) and (loose == domain or domain in loose or (len(loose) >= 4 and loose in domain))


def clean_title(title: str, url: str = "") -> str:
    """Strip a site-name prefix/suffix and collapse whitespace."""
    title = normalize_spaces(title)
    parts = _TITLE_SPLIT_RE.split(title)
    if len(parts) < 2:
        return title

    domain = _loose(base_domain(urlsplit(url).hostname or "").split(".")[0]) if url else ""
    if domain:
        if _matches_domain(parts[-1], domain):
            return " - ".join(parts[:-1])
        if _matches_domain(parts[0], domain):
            return " - ".join(parts[1:])

    # Breadcrumb-style titles: the longest segment is the article.
    if len(parts) >= 3:
        return max(parts, key=len)
    return title


def extract_title(doc: ParsedDocument) -> Optional[str]:
    soup = doc.soup
    raw = meta_content(soup, TITLE_META_TAGS)
    if not raw:
        raw = first_selector_text(soup, TITLE_SELECTORS)
    if not raw and soup.title is not None:
        raw = soup.title.get_text()
    return clean_title(raw, doc.url) if raw else None


# ---------------------------------------------------------------------------
# Author
# ---------------------------------------------------------------------------

AUTHOR_META_TAGS = (
    "byl", "clmst", "dc.author", "dcsext.author", "dc.creator", "rbauthors", "authors",
    "author", "article:author", "parsely-author", "sailthru.author",
)
AUTHOR_SELECTORS = (
    ".entry .entry-author", ".author.vcard .fn", ".author .vcard .fn", ".byline.vcard .fn",
    ".byline .vcard .fn", ".byline .by .author", ".byline .by", ".byline .author",
    ".post-author.vcard", ".post-author .vcard", "a[rel=author]", "#by_author", ".by_author",
    "#entryAuthor", ".entryAuthor", ".byline a[href*=author]", "#author .authorname",
    ".author .authorname", "#author", ".author", ".articleauthor", ".ArticleAuthor", ".byline",
)
BYLINE_SELECTORS = ("#byline", ".byline")

_BYLINE_RE = re.compile(r"^[\n\s]*By\b", re.IGNORECASE)
_AUTHOR_PREFIX_RE = re.compile(r"^\s*(?:posted\s+by|written\s+by|by)\s*:?\s*", re.IGNORECASE)
_MAX_AUTHOR_LENGTH = 300


def clean_author(author: str) -> Optional[str]:
    author = normalize_spaces(_AUTHOR_PREFIX_RE.sub("", normalize_spaces(author)))
    if not author or len(author) > _MAX_AUTHOR_LENGTH:
        return None
    return author


def extract_author(doc: ParsedDocument) -> Optional[str]:
    soup = doc.soup
    author = meta_content(soup, AUTHOR_META_TAGS)
    if author and not author.startswith(("http://", "https://")):
        return clean_author(author)

    author = first_selector_text(soup, AUTHOR_SELECTORS, max_length=_MAX_AUTHOR_LENGTH)
    if author:
        return clean_author(author)

    for selector in BYLINE_SELECTORS:
        for node in soup.select(selector):
            text = node_text(node)
            if _BYLINE_RE.search(text):
                return clean_author(text)
    return None


# ---------------------------------------------------------------------------
# Date published
# ---------------------------------------------------------------------------

DATE_PUBLISHED_META_TAGS = (
    "article:published_time", "datepublished", "displaydate", "dc.date", "dc.date.issued",
    "rbpubdate", "publish_date", "pub_date", "pagedate", "pubdate", "revision_date",
    "doc_date", "date_created", "content_create_date", "lastmodified", "created", "date",
    "sailthru.date", "parsely-pub-date",
)
DATE_PUBLISHED_SELECTORS = (
    ".hentry .dtstamp.published", ".hentry .published", ".hentry .dtstamp.updated",
    ".hentry .updated", ".single .published", ".meta .published", ".meta .postDate",
    ".entry-date", ".byline .date", ".postmetadata .date", ".article_datetime",
    ".date-header", ".story-date", ".dateStamp", "#story .datetime", ".dateline", ".pubdate",
    ".post-date", ".timestamp",
)

_DATE_URL_RES = (
    re.compile(r"/(20\d{2}|19\d{2})/(\d{1,2})/(\d{1,2})/"),
    re.compile(r"(20\d{2}|19\d{2})-(\d{2})-(\d{2})"),
)
_DATE_LABEL_RE = re.compile(
    r"^\s*(?:published|posted|updated|last updated|date)\s*(?:on|at)?\s*:?\s*", re.IGNORECASE
)
_EPOCH_RE = re.compile(r"^\d{10}(?:\d{3})?$")


def clean_date_published(value: str) -> Optional[str]:
    """Parse *value* into an ISO 8601 UTC timestamp, or ``None``."""
    value = normalize_spaces(value or "")
    if not value:
        return None

    if _EPOCH_RE.match(value):
        seconds = int(value) / (1000 if len(value) == 13 else 1)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()

    value = _DATE_LABEL_RE.sub("", value)
    try:
        parsed = date_parser.parse(value, fuzzy=True)
    except (ValueError, OverflowError):
        return None
    if parsed.year < 1970:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()


def _date_from_url(url: str) -> Optional[str]:
    for pattern in _DATE_URL_RES:
        match = pattern.search(url)
        if match:
            year, month, day = (int(g) for g in match.groups())
            try:
                return datetime(year, month, day, tzinfo=timezone.utc).isoformat()
            except ValueError:
                continue
    return None


def _date_from_trafilatura(doc: ParsedDocument) -> Optional[str]:
    metadata = trafilatura.extract_metadata(str(doc.soup), default_url=doc.url)
    date = getattr(metadata, "date", None) if metadata is not None else None
    return clean_date_published(date) if date else None


def extract_date_published(doc: ParsedDocument) -> Optional[str]:
    soup = doc.soup
    candidates: list[str] = []

    meta = meta_content(soup, DATE_PUBLISHED_META_TAGS)
    if meta:
        candidates.append(meta)
    for node in soup.select("time[datetime], [itemprop=datePublished]"):
        value = node.get("datetime") or node.get("content") or node_text(node)
        if value:
            candidates.append(value)
            break
    text = first_selector_text(soup, DATE_PUBLISHED_SELECTORS, max_length=100)
    if text:
        candidates.append(text)

    for candidate in candidates:
        cleaned = clean_date_published(candidate)
        if cleaned:
            return cleaned

    return _date_from_url(doc.url) or _date_from_trafilatura(doc)


# ---------------------------------------------------------------------------
# Dek
# ---------------------------------------------------------------------------

DEK_META_TAGS = ("description", "og:description", "twitter:description")


def clean_dek(dek: str, content_text: str = "") -> Optional[str]:
    """Reject deks that are too short/long or merely repeat the content opening."""
    dek = normalize_spaces(dek)
    if len(dek) < 5 or len(dek) > 1000:
        return None
    if content_text and normalize_spaces(content_text).startswith(dek.rstrip(".…")):
        return None
    return dek


def extract_dek(doc: ParsedDocument, content_text: str = "") -> Optional[str]:
    dek = meta_content(doc.soup, DEK_META_TAGS)
    return clean_dek(dek, content_text) if dek else None


# ---------------------------------------------------------------------------
# Lead image
# ---------------------------------------------------------------------------

LEAD_IMAGE_META_TAGS = ("og:image", "og:image:url", "og:image:secure_url", "twitter:image", "image_src")
LEAD_IMAGE_SELECTORS = ("link[rel=image_src]",)

_POSITIVE_IMAGE_HINTS_RE = re.compile(r"upload|wp-content|large|photo|wp-image", re.IGNORECASE)
_NEGATIVE_IMAGE_HINTS_RE = re.compile(
    r"spacer|sprite|blank|throbber|gradient|tile|bg|background|icon|social|header|hdr|"
    r"advert|spinner|loader|loading|default|rating|share|facebook|twitter|theme|promo|"
    r"ads|wp-includes|avatar|logo",
    re.IGNORECASE,
)
_GIF_RE = re.compile(r"\.gif(?:\?|$)", re.IGNORECASE)
_JPG_RE = re.compile(r"\.(?:jpe?g|png|webp)(?:\?|$)", re.IGNORECASE)


def _dimension(img: Tag, attr: str) -> Optional[int]:
    value = str(img.get(attr) or "").rstrip("px")
    return int(value) if value.isdigit() else None


def score_image(img: Tag, index: int, total: int) -> float:
    src = img.get("src") or ""
    score = 0.0
    if _POSITIVE_IMAGE_HINTS_RE.search(src):
        score += 20
    if _NEGATIVE_IMAGE_HINTS_RE.search(src):
        score -= 20
    if _GIF_RE.search(src):
        score -= 10
    if _JPG_RE.search(src):
        score += 10
    if img.get("alt"):
        score += 5

    parent = img.parent
    if isinstance(parent, Tag):
        if parent.name == "figure":
            score += 25
        if parent.find("figcaption") is not None:
            score += 25

    width, height = _dimension(img, "width"), _dimension(img, "height")
    if width is not None and width <= 50 or height is not None and height <= 50:
        score -= 50
    elif width and height:
        area = width * height
        score += -100 if area < 5000 else round(area / 1000)

    # Earlier images are more likely to be the lead.
    score += total / 2 - index
    return score


def extract_lead_image_url(doc: ParsedDocument, content: Optional[Tag] = None) -> Optional[str]:
    soup = doc.soup
    url = meta_content(soup, LEAD_IMAGE_META_TAGS)
    if url:
        return url
    for selector in LEAD_IMAGE_SELECTORS:
        node = soup.select_one(selector)
        if node is not None and node.get("href"):
            return node["href"]

    if content is None:
        return None
    images = [img for img in content.find_all("img") if img.get("src")]
    best, best_score = None, 0.0
    for index, img in enumerate(images):
        score = score_image(img, index, len(images))
        if score > best_score:
            best, best_score = img, score
    return best["src"] if best is not None else None


# ---------------------------------------------------------------------------
# Derived fields: excerpt, word count, direction
# ---------------------------------------------------------------------------

EXCERPT_LENGTH = 200


def excerpt_from_text(text: str, length: int = EXCERPT_LENGTH) -> str:
    text = normalize_spaces(text)
    if len(text) <= length:
        return text
    cut = text[:length]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(",;:.") + "…"


def word_count(text: str) -> int:
    return len(normalize_spaces(text).split()) if text else 0


def text_direction(text: str, declared: Optional[str] = None) -> str:
    """``rtl`` when right-to-left letters outnumber left-to-right ones."""
    if declared and declared.lower() in ("ltr", "rtl"):
        return declared.lower()
    rtl = ltr = 0
    for char in text:
        bidi = unicodedata.bidirectional(char)
        if bidi in ("R", "AL"):
            rtl += 1
        elif bidi == "L":
            ltr += 1
    return "rtl" if rtl > ltr else "ltr"


def declared_direction(doc: ParsedDocument) -> Optional[str]:
    for name in ("html", "body"):
        node = doc.soup.find(name)
        if node is not None and node.get("dir"):
            return node["dir"]
    return None
