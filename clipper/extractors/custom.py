"""Apply a custom :class:`ExtractorRule` field to a document."""

from __future__ import annotations

import logging
from typing import Optional, Union

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from clipper.errors import ExtractionError
from clipper.extractors.generic.scoring import node_text
from clipper.extractors.rules import FieldRule, Selector

logger = logging.getLogger(__name__)


def _select(soup: BeautifulSoup, selector: str, field: str) -> list[Tag]:
    try:
        return soup.select(selector)
    except SelectorSyntaxError as exc:
        raise ExtractionError(f"Invalid selector {selector!r} for {field}: {exc}") from exc


def apply_transforms(node: Tag, rule: FieldRule, field: str) -> None:
    """Rename or rewrite matches of each transform selector inside *node*."""
    for selector, transform in rule.transforms.items():
        matches = [node] if node.css.match(selector) else []
        matches += node.select(selector)
        for match in matches:
            if match.decomposed:
                continue
            if isinstance(transform, str):
                match.name = transform
                continue
            try:
                result = transform(match)
            except Exception as exc:
                raise ExtractionError(
                    f"Transform for {selector!r} failed while extracting {field}: {exc}"
                ) from exc
            if isinstance(result, str) and not match.decomposed:
                match.name = result


def apply_clean(node: Tag, rule: FieldRule) -> None:
    for selector in rule.clean:
        for match in node.select(selector):
            if not match.decomposed:
                match.decompose()


def _value_for(selector: Selector, soup: BeautifulSoup, field: str, as_node: bool) -> Union[str, Tag, None]:
    if isinstance(selector, tuple):
        css, attribute = selector
        for match in _select(soup, css, field):
            value = match.get(attribute)
            if isinstance(value, list):
                value = " ".join(value)
            if value and value.strip():
                return value.strip()
        return None

    matches = _select(soup, selector, field)
    if not matches:
        return None
    if as_node:
        return matches[0]
    # Text fields only trust a selector that pins down a single node.
    if len(matches) != 1:
        return None
    text = node_text(matches[0])
    return text or None


def select_field(
    soup: BeautifulSoup,
    rule: Optional[FieldRule],
    field: str,
    as_node: bool = False,
) -> Union[str, Tag, None]:
    """Run *rule*'s selectors in order and return the first value found.

    For ``as_node`` fields (content) the matched node is returned after its
    transforms and ``clean`` selectors have been applied.  The caller's tree
    is modified in place, so pass a copy when that matters.

    Raises:
        ExtractionError: A selector is invalid or a transform raised.
    """
    if rule is None:
        return None
    for selector in rule.selectors:
        value = _value_for(selector, soup, field, as_node)
        if value is None:
            continue
        if isinstance(value, Tag):
            apply_transforms(value, rule, field)
            apply_clean(value, rule)
        logger.debug("Custom selector %r matched for %s", selector, field)
        return value
    return None
