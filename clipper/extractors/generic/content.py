"""Locate the main article body of a page by content scoring."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, replace
from typing import Optional

from bs4 import BeautifulSoup, Tag

from clipper.extractors.generic.cleaners import (
    clean_content,
    convert_to_paragraphs,
    strip_unlikely_candidates,
)
from clipper.extractors.generic.scoring import (
    ScoreBoard,
    find_top_candidate,
    link_density,
    node_text,
    score_content,
)
from clipper.resource.models import ParsedDocument

logger = logging.getLogger(__name__)

# Below this many characters an extraction is considered a miss and retried
# with a less aggressive configuration.
MIN_CONTENT_LENGTH = 200


@dataclass(frozen=True)
class ExtractionFlags:
    strip_unlikely: bool = True
    weight_nodes: bool = True
    clean_conditionally: bool = True


def _flag_sequence() -> list[ExtractionFlags]:
    """Each retry turns one more heuristic off, most destructive first."""
    flags = ExtractionFlags()
    sequence = [flags]
    for name in ("strip_unlikely", "weight_nodes", "clean_conditionally"):
        flags = replace(flags, **{name: False})
        sequence.append(flags)
    return sequence


def merge_siblings(candidate: Tag, top_score: float, board: ScoreBoard, soup: BeautifulSoup) -> Tag:
    """Wrap *candidate* together with siblings that look like more of the article."""
    parent = candidate.parent
    if not isinstance(parent, Tag) or parent.name in ("[document]", "html"):
        return candidate

    threshold = max(10, top_score * 0.25)
    candidate_classes = set(candidate.get("class") or [])
    wrapper = soup.new_tag("div")

    for sibling in [c for c in parent.children if isinstance(c, Tag)]:
        if sibling is candidate:
            wrapper.append(sibling)
            continue

        density = link_density(sibling)
        bonus = 0.0
        if density < 0.05:
            bonus += 20
        if density >= 0.5:
            bonus -= 20
        if candidate_classes and candidate_classes & set(sibling.get("class") or []):
            bonus += top_score * 0.2

        sibling_score = board.get(sibling)
        if sibling_score is not None and sibling_score + bonus >= threshold:
            wrapper.append(sibling)
            continue

        if sibling.name == "p":
            text = node_text(sibling)
            if len(text) > 80 and density < 0.25:
                wrapper.append(sibling)
            elif len(text) <= 80 and density == 0 and text.endswith((".", "!", "?")):
                wrapper.append(sibling)

    if len(wrapper.contents) == 1:
        return candidate
    return wrapper


def _extract_with_flags(doc: ParsedDocument, title: str, flags: ExtractionFlags) -> Optional[Tag]:
    soup = copy.copy(doc.soup)
    if flags.strip_unlikely:
        strip_unlikely_candidates(soup)
    convert_to_paragraphs(soup)

    board = score_content(soup, weight_nodes=flags.weight_nodes)
    candidate = find_top_candidate(soup, board)
    if candidate is None:
        return None

    top_score = board.get(candidate) or 0
    root = merge_siblings(candidate, top_score, board, soup)
    return clean_content(
        root,
        title=title,
        board=board,
        weight_nodes=flags.weight_nodes,
        conditional=flags.clean_conditionally,
    )


def extract_content(doc: ParsedDocument, title: str = "") -> Optional[Tag]:
    """Return the cleaned content root of *doc*, or ``None`` for an empty page.

    Extraction is retried with progressively fewer heuristics while the
    result is shorter than :data:`MIN_CONTENT_LENGTH`; the longest attempt
    wins if none clears the bar.  The input tree is never modified.
    """
    best: Optional[Tag] = None
    best_length = -1
    for flags in _flag_sequence():
        node = _extract_with_flags(doc, title, flags)
        if node is None:
            continue
        length = len(node_text(node))
        if length >= MIN_CONTENT_LENGTH:
            return node
        logger.debug("Content too short (%d chars) with %s; retrying", length, flags)
        if length > best_length:
            best, best_length = node, length
    return best
