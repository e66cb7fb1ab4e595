"""Turn raw response bytes into a clean, absolutised BeautifulSoup tree."""

from __future__ import annotations

import codecs
import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment, UnicodeDammit

from clipper.errors import ParseError
from clipper.resource.models import FetchResult, ParsedDocument

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

_STRIP_TAGS = ["script", "style", "noscript", "template", "link[rel=stylesheet]"]

_LAZY_SRC_ATTRS = ("data-src", "data-lazy-src", "data-original", "data-srcset")

_HEADER_CHARSET_RE = re.compile(r"charset=[\"']?([\w.:-]+)", re.IGNORECASE)
_META_CHARSET_RE = re.compile(
    rb"<meta[^>]+charset=[\"']?([\w.:-]+)", re.IGNORECASE
)


def _known_encoding(name: str | None) -> str | None:
    if not name:
        return None
    try:
        return codecs.lookup(name).name
    except LookupError:
        return None


def detect_encoding(response: FetchResult) -> str:
    """Pick a charset: HTTP header, then in-document ``<meta>``, then sniffing."""
    match = _HEADER_CHARSET_RE.search(response.headers.get("content-type", ""))
    encoding = _known_encoding(match.group(1)) if match else None
    if encoding:
        return encoding

    meta = _META_CHARSET_RE.search(response.body[:4096])
    encoding = _known_encoding(meta.group(1).decode("ascii", "ignore")) if meta else None
    if encoding:
        return encoding

    dammit = UnicodeDammit(response.body, is_html=True)
    return _known_encoding(dammit.original_encoding) or DEFAULT_ENCODING


def _decode(body: bytes, encoding: str, url: str) -> str:
    try:
        return body.decode(encoding)
    except UnicodeDecodeError:
        pass
    # Declared charset lied; let bs4 sniff before giving up.
    dammit = UnicodeDammit(body, is_html=True)
    if dammit.unicode_markup is None:
        raise ParseError(f"Could not decode response body as {encoding}", url=url)
    logger.debug("Declared charset %s failed for %s; using %s", encoding, url, dammit.original_encoding)
    return dammit.unicode_markup


def _absolutize(soup: BeautifulSoup, url: str) -> None:
    base_tag = soup.find("base", href=True)
    base = urljoin(url, base_tag["href"]) if base_tag else url

    for tag in soup.find_all(href=True):
        href = tag["href"].strip()
        if href and not href.startswith(("#", "javascript:", "mailto:", "data:")):
            tag["href"] = urljoin(base, href)
    for tag in soup.find_all(src=True):
        tag["src"] = urljoin(base, tag["src"].strip())
    for tag in soup.find_all(srcset=True):
        candidates = []
        for candidate in tag["srcset"].split(","):
            parts = candidate.strip().split()
            if parts:
                parts[0] = urljoin(base, parts[0])
                candidates.append(" ".join(parts))
        tag["srcset"] = ", ".join(candidates)


def _convert_lazy_images(soup: BeautifulSoup) -> None:
    for img in soup.find_all("img"):
        for attr in _LAZY_SRC_ATTRS:
            value = img.get(attr)
            if not value:
                continue
            target = "srcset" if attr.endswith("srcset") else "src"
            if not img.get(target):
                img[target] = value


def build_document(html: str, url: str, encoding: str = DEFAULT_ENCODING) -> ParsedDocument:
    """Parse already-decoded *html* and apply the normalisation passes."""
    soup = BeautifulSoup(html, "html.parser")
    if soup.find(True) is None:
        raise ParseError("Document produced an empty tree", url=url)

    for selector in _STRIP_TAGS:
        for tag in soup.select(selector):
            tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    _convert_lazy_images(soup)
    _absolutize(soup, url)
    return ParsedDocument(url=url, encoding=encoding, soup=soup)


def normalize(response: FetchResult, url: str | None = None) -> ParsedDocument:
    """Decode *response* and build a :class:`ParsedDocument`.

    Raises:
        ParseError: The body is empty, undecodable, or yields no elements.
    """
    url = url or response.url
    if not response.body or not response.body.strip():
        raise ParseError("Response body was empty", url=url)
    encoding = detect_encoding(response)
    html = _decode(response.body, encoding, url)
    return build_document(html, url, encoding)
