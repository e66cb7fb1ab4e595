"""DOM cleaning passes applied to the selected content root."""

from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

from clipper.extractors.generic.scoring import (
    CANDIDATES_WHITELIST_RE,
    UNLIKELY_CANDIDATES_RE,
    ScoreBoard,
    class_and_id,
    get_weight,
    link_density,
    node_text,
    normalize_spaces,
    score_commas,
)

KEEP_ATTRIBUTES = frozenset(
    {"src", "srcset", "href", "alt", "title", "width", "height", "allowfullscreen", "frameborder"}
)

MEDIA_TAGS = frozenset({"img", "video", "audio", "iframe", "embed", "object", "picture", "source", "figure"})

JUNK_TAGS = (
    "title", "script", "noscript", "link", "style", "hr", "embed", "iframe", "object",
    "form", "input", "button", "textarea", "select", "option", "label", "meta",
)

KEEP_EMBED_RE = re.compile(
    r"youtube\.com|youtube-nocookie\.com|youtu\.be|player\.vimeo\.com|vimeo\.com|"
    r"dailymotion\.com|soundcloud\.com|twitter\.com/.+/status|instagram\.com/p/",
    re.IGNORECASE,
)

BOILERPLATE_RE = re.compile(
    r"share|sharing|social|newsletter|subscribe|signup|promo|advert|sponsor|"
    r"related|recommend|breadcrumb|comment|disqus|outbrain|taboola|print-?only|toolbar",
    re.IGNORECASE,
)

DIV_TO_P_BLOCK_TAGS = ("a", "blockquote", "dl", "div", "img", "p", "pre", "table")
CLEAN_CONDITIONALLY_TAGS = ("ul", "ol", "table", "div", "section", "aside")

# Never stripped by the unlikely-candidate or boilerplate passes.
PROTECTED_TAGS = frozenset({"html", "body", "a", "img", "figure", "video", "picture", "source"})


# ---------------------------------------------------------------------------
# Pre-scoring passes (whole document)
# ---------------------------------------------------------------------------

def strip_unlikely_candidates(soup: BeautifulSoup) -> None:
    """Remove nodes whose class/id look like page chrome."""
    for node in soup.find_all(True):
        if node.decomposed or node.name in PROTECTED_TAGS:
            continue
        hints = class_and_id(node)
        if not hints or CANDIDATES_WHITELIST_RE.search(hints):
            continue
        if UNLIKELY_CANDIDATES_RE.search(hints):
            node.decompose()


def convert_to_paragraphs(soup: BeautifulSoup) -> None:
    """Turn text-only ``div``s and free-standing ``span``s into paragraphs."""
    for div in soup.find_all("div"):
        if div.decomposed:
            continue
        if div.find(DIV_TO_P_BLOCK_TAGS) is None and node_text(div):
            div.name = "p"
    for span in soup.find_all("span"):
        if span.decomposed or span.find_parent(["p", "div", "li", "figcaption", "td", "a"]):
            continue
        span.name = "p"


# ---------------------------------------------------------------------------
# Post-selection passes (content root only)
# ---------------------------------------------------------------------------

def _is_kept_embed(node: Tag) -> bool:
    src = node.get("src") or node.get("data") or ""
    return bool(KEEP_EMBED_RE.search(src))


def strip_junk_tags(root: Tag) -> None:
    for node in root.find_all(JUNK_TAGS):
        if node.decomposed:
            continue
        if node.name in ("iframe", "embed", "object") and _is_kept_embed(node):
            continue
        node.decompose()


def clean_images(root: Tag) -> None:
    """Drop spacer/tracking images and fixed heights that distort layout."""
    for img in root.find_all("img"):
        if not img.get("src") and not img.get("srcset"):
            img.decompose()
            continue
        small = False
        for attr in ("width", "height"):
            value = str(img.get(attr) or "").rstrip("px")
            if value.isdigit() and int(value) < 10:
                small = True
        if small:
            img.decompose()
            continue
        if img.has_attr("height"):
            del img["height"]


def remove_boilerplate(root: Tag) -> None:
    for node in root.find_all(True):
        if node.decomposed or node.name in PROTECTED_TAGS:
            continue
        hints = class_and_id(node)
        if hints and BOILERPLATE_RE.search(hints) and not CANDIDATES_WHITELIST_RE.search(hints):
            node.decompose()


def clean_h_ones(root: Tag) -> None:
    """A couple of h1s inside content are usually repeated titles; many are section heads."""
    h1s = root.find_all("h1")
    if len(h1s) < 3:
        for h1 in h1s:
            h1.decompose()
    else:
        for h1 in h1s:
            h1.name = "h2"


def clean_headers(root: Tag, title: str = "") -> None:
    """Remove headers that repeat the title or carry chrome-like class hints."""
    title = normalize_spaces(title).lower()
    for header in root.find_all(["h2", "h3", "h4", "h5", "h6"]):
        if header.decomposed:
            continue
        if title and node_text(header).lower() == title:
            header.decompose()
        elif get_weight(header) < 0:
            header.decompose()


def _contains_media(node: Tag) -> bool:
    return node.name in MEDIA_TAGS or node.find(list(MEDIA_TAGS)) is not None


def clean_conditionally(root: Tag, board: Optional[ScoreBoard] = None, weight_nodes: bool = True) -> None:
    """Remove lists, tables and divs that look more like chrome than content."""
    for node in reversed(root.find_all(CLEAN_CONDITIONALLY_TAGS)):
        if node.decomposed or node is root:
            continue
        score = board.get(node) if board is not None else None
        weight = score if score is not None else (get_weight(node) if weight_nodes else 0)
        if weight < 0:
            node.decompose()
            continue

        text = node_text(node)
        if score_commas(text) >= 10:
            continue

        p_count = len(node.find_all("p"))
        img_count = len(node.find_all("img"))
        li_count = len(node.find_all("li"))
        input_count = len(node.find_all("input"))
        density = link_density(node)
        content_length = len(text)
        is_list = node.name in ("ul", "ol")

        if is_list:
            previous = node.find_previous_sibling()
            if previous is not None and node_text(previous).endswith(":"):
                continue

        remove = False
        if img_count > 1 and p_count / img_count < 0.5 and not node.find("figure"):
            remove = True
        elif not is_list and li_count > p_count + 100:
            remove = True
        elif input_count > p_count / 3:
            remove = True
        elif content_length < 25 and img_count == 0 and not _contains_media(node):
            remove = True
        elif weight < 25 and density > 0.2 and content_length > 75:
            remove = True
        elif weight >= 25 and density > 0.5:
            remove = True
        elif is_list and density > 0.5:
            remove = True

        if remove:
            node.decompose()


def remove_empty(root: Tag) -> None:
    """Remove elements with neither text nor media, innermost first."""
    for node in reversed(root.find_all(["p", "div", "span", "section", "strong", "em", "li", "ul", "ol", "figure"])):
        if node.decomposed or node is root:
            continue
        if node.get_text(strip=True):
            continue
        if _contains_media(node) and node.name != "figure":
            continue
        if node.name == "figure" and node.find(["img", "video", "iframe", "picture"]):
            continue
        node.decompose()


def clean_attributes(root: Tag) -> None:
    for node in [root, *root.find_all(True)]:
        node.attrs = {k: v for k, v in node.attrs.items() if k in KEEP_ATTRIBUTES}


def clean_content(
    root: Tag,
    title: str = "",
    board: Optional[ScoreBoard] = None,
    weight_nodes: bool = True,
    conditional: bool = True,
) -> Tag:
    """Run every post-selection pass over *root* and return it as a ``div``."""
    clean_images(root)
    strip_junk_tags(root)
    remove_boilerplate(root)
    clean_h_ones(root)
    clean_headers(root, title)
    if conditional:
        clean_conditionally(root, board, weight_nodes)
    remove_empty(root)
    clean_attributes(root)
    if root.name in ("html", "body", "article", "main", "section"):
        root.name = "div"
    return root
