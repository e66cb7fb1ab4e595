"""Content scoring primitives for the generic extractor.

Scores live in a :class:`ScoreBoard` keyed by node identity rather than on
the DOM itself, so a scored tree serialises without bookkeeping attributes.
"""

from __future__ import annotations

import math
import re
from typing import Iterator, Optional

from bs4 import BeautifulSoup, Tag

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

POSITIVE_SCORE_RE = re.compile(
    r"article|articlecontent|instapaper_body|blog|body|content|entry-content-asset|"
    r"entry|hentry|main|normal|page|pagination|permalink|post|story|text|[-_]copy|\Bcopy",
    re.IGNORECASE,
)

NEGATIVE_SCORE_RE = re.compile(
    r"adbox|advert|author|bio|bookmark|bottom|byline|clear|com-|combx|comment|contact|"
    r"credit|crumb|date|deck|excerpt|featured|foot|footer|footnote|graf|head|info|"
    r"infotext|instapaper_ignore|jump|linebreak|link|masthead|media|meta|modal|outbrain|"
    r"promo|pr_|related|respond|roundcontent|scroll|secondary|share|shopping|shoutbox|"
    r"side|sidebar|sponsor|stamp|sub|summary|tags|tools|widget",
    re.IGNORECASE,
)

PHOTO_HINTS_RE = re.compile(r"figure|photo|image|caption", re.IGNORECASE)
READABILITY_ASSET_RE = re.compile(r"entry-content-asset", re.IGNORECASE)

UNLIKELY_CANDIDATES_RE = re.compile(
    r"ad-break|adbox|advert|addthis|agegate|aux|blogger-labels|combx|comment|"
    r"conversation|disqus|entry-unrelated|extra|foot|header|hidden|loader|login|menu|"
    r"meta|nav|outbrain|pager|pagination|popup|printfriendly|related|remove|remark|rss|"
    r"share|shoutbox|sidebar|sociable|sponsor|taboola|tools",
    re.IGNORECASE,
)

CANDIDATES_WHITELIST_RE = re.compile(
    r"article|body|blogindex|column|content|entry-content-asset|format|hfeed|hentry|"
    r"hatom|main|page|posts|shadow",
    re.IGNORECASE,
)

# (container, child) pairs that mark hNews-style article bodies.
HNEWS_CONTENT_SELECTORS = (
    (".hentry", ".entry-content"),
    ("entry", ".entry-content"),
    (".entry", ".entry_content"),
    (".post", ".postbody"),
    (".post", ".post_body"),
    (".post", ".post-body"),
)

PARAGRAPH_SCORE_TAGS = frozenset({"p", "li", "span", "pre"})
CHILD_CONTENT_TAGS = frozenset({"td", "blockquote", "ol", "ul", "dl"})
BAD_TAGS = frozenset({"address", "form"})
BOILERPLATE_TAGS = frozenset({"nav", "aside", "footer", "header"})
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6", "th"})

NON_TOP_CANDIDATE_TAGS = frozenset(
    {"br", "b", "i", "label", "hr", "area", "base", "basefont", "input", "img", "link", "meta"}
)

_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def normalize_spaces(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def node_text(node: Tag) -> str:
    return normalize_spaces(node.get_text(" "))


def link_density(node: Tag) -> float:
    """Share of *node*'s text that sits inside ``<a>`` tags."""
    total = len(node_text(node))
    if not total:
        return 0.0
    link_length = sum(len(node_text(a)) for a in node.find_all("a"))
    return min(link_length / total, 1.0)


def class_and_id(node: Tag) -> str:
    classes = node.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    return f"{' '.join(classes)} {node.get('id') or ''}".strip()


# ---------------------------------------------------------------------------
# Node scores
# ---------------------------------------------------------------------------

def get_weight(node: Tag) -> int:
    """Class/id weight: +/-25 for positive/negative hints, bonuses for assets."""
    score = 0
    node_id = node.get("id") or ""
    classes = " ".join(node.get("class") or [])

    if node_id:
        if POSITIVE_SCORE_RE.search(node_id):
            score += 25
        if NEGATIVE_SCORE_RE.search(node_id):
            score -= 25

    if classes:
        if score == 0:
            if POSITIVE_SCORE_RE.search(classes):
                score += 25
            if NEGATIVE_SCORE_RE.search(classes):
                score -= 25
        if PHOTO_HINTS_RE.search(classes):
            score += 10
        if READABILITY_ASSET_RE.search(classes):
            score += 25

    return score


def score_commas(text: str) -> int:
    return text.count(",") + text.count("，")


def score_length(text_length: int, chunk: int = 50) -> int:
    return max(0, min(text_length // chunk, 3))


def score_paragraph(node: Tag) -> float:
    """Paragraph score: 1 + commas + up to 3 points for length."""
    text = node_text(node)
    if len(text) < 25:
        return 0
    score = 1 + score_commas(text) + score_length(len(text))
    # A trailing colon usually introduces a list, not prose.
    if text.endswith(":"):
        score -= 1
    return score


def score_node(node: Tag) -> float:
    """Seed score from tag semantics."""
    name = node.name
    if name in PARAGRAPH_SCORE_TAGS:
        return score_paragraph(node)
    if name == "div":
        return 5
    if name in CHILD_CONTENT_TAGS:
        return 3
    if name in BAD_TAGS:
        return -3
    if name in HEADING_TAGS:
        return -5
    if name in BOILERPLATE_TAGS:
        return -25
    return 0


class ScoreBoard:
    """Scores for the nodes of one tree, keyed by identity."""

    def __init__(self, weight_nodes: bool = True) -> None:
        self.weight_nodes = weight_nodes
        self._scores: dict[int, float] = {}
        self._nodes: dict[int, Tag] = {}

    def __contains__(self, node: Tag) -> bool:
        return id(node) in self._scores

    def get(self, node: Tag) -> Optional[float]:
        return self._scores.get(id(node))

    def set(self, node: Tag, score: float) -> None:
        self._scores[id(node)] = score
        self._nodes[id(node)] = node

    def get_or_init(self, node: Tag) -> float:
        score = self.get(node)
        if score is None:
            score = score_node(node)
            if self.weight_nodes:
                score += get_weight(node)
            self.set(node, score)
        return score

    def add(self, node: Optional[Tag], amount: float) -> None:
        if node is None or not isinstance(node, Tag) or node.name in ("[document]", "html"):
            return
        self.set(node, self.get_or_init(node) + amount)

    def nodes(self) -> Iterator[tuple[Tag, float]]:
        for key, node in self._nodes.items():
            yield node, self._scores[key]


def score_content(soup: BeautifulSoup, weight_nodes: bool = True) -> ScoreBoard:
    """Score every paragraph and propagate weight up two levels.

    A paragraph passes its full score to its parent and half to its
    grandparent; hNews containers get a flat bonus.
    """
    board = ScoreBoard(weight_nodes=weight_nodes)

    for parent_selector, child_selector in HNEWS_CONTENT_SELECTORS:
        for node in soup.select(f"{parent_selector} {child_selector}"):
            parent = node.parent
            if isinstance(parent, Tag) and parent.css.match(parent_selector):
                board.add(parent, 80)

    for node in soup.find_all(["p", "pre"]):
        board.get_or_init(node)
        raw = score_node(node)
        parent = node.parent
        if isinstance(parent, Tag):
            board.add(parent, raw)
            grandparent = parent.parent
            if isinstance(grandparent, Tag):
                board.add(grandparent, raw / 2)

    for node in soup.find_all(list(BOILERPLATE_TAGS)):
        board.get_or_init(node)

    return board


def effective_score(node: Tag, score: float) -> float:
    """Aggregate score discounted by link density."""
    return score * (1 - link_density(node))


def find_top_candidate(soup: BeautifulSoup, board: ScoreBoard) -> Optional[Tag]:
    """Highest effective score wins; ties go to more text, then document order."""
    best: Optional[Tag] = None
    best_key = (-math.inf, -1)
    for node in soup.find_all(True):
        if node.name in NON_TOP_CANDIDATE_TAGS:
            continue
        score = board.get(node)
        if score is None:
            continue
        key = (effective_score(node, score), len(node_text(node)))
        if key > best_key:
            best, best_key = node, key

    if best is None or best_key[0] <= 0:
        return soup.body or soup.find(True)
    return best
