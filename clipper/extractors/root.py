"""Extract every field of one page, through a custom rule or the generic heuristics."""

from __future__ import annotations

import copy
from collections.abc import Collection
from typing import Optional

from bs4 import Tag

from clipper.errors import ExtractionError
from clipper.extractors.custom import select_field
from clipper.extractors.generic.cleaners import clean_content
from clipper.extractors.generic.content import extract_content
from clipper.extractors.generic.fields import (
    clean_author,
    clean_date_published,
    clean_dek,
    clean_title,
    declared_direction,
    excerpt_from_text,
    extract_author,
    extract_date_published,
    extract_dek,
    extract_lead_image_url,
    extract_title,
    text_direction,
    word_count,
)
from clipper.extractors.generic.next_page import estimate_total_pages, extract_next_page_url
from clipper.extractors.generic.scoring import node_text
from clipper.extractors.resolver import Resolution
from clipper.extractors.rules import ExtractorRule
from clipper.models import ExtractionFields
from clipper.resource.models import ParsedDocument


def _rule_text(doc: ParsedDocument, rule: Optional[ExtractorRule], name: str) -> Optional[str]:
    if rule is None:
        return None
    value = select_field(doc.soup, rule.field_rule(name), name)
    return value if isinstance(value, str) else None


def _content_node(doc: ParsedDocument, rule: Optional[ExtractorRule], title: str) -> Optional[Tag]:
    if rule is None or rule.content is None:
        return extract_content(doc, title=title)

    node = select_field(copy.copy(doc.soup), rule.content, "content", as_node=True)
    if not isinstance(node, Tag):
        raise ExtractionError(
            f"Custom rule for {rule.domain} matched no content", url=doc.url
        )
    if rule.content.default_cleaner:
        clean_content(node, title=title)
    return node


def serialize_content(node: Optional[Tag], content_type: str = "html") -> str:
    if node is None:
        return ""
    if content_type == "text":
        return node.get_text("\n", strip=True)
    return str(node)


def extract_page(
    doc: ParsedDocument,
    resolution: Resolution,
    content_type: str = "html",
    visited: Collection[str] = (),
    current_page: int = 1,
) -> ExtractionFields:
    """Extract all fields of *doc*.

    Custom-rule values win wherever the rule defines a field and its
    selectors match; everything else falls back to generic heuristics.
    Excerpt, word count and direction always derive from the final content.

    Raises:
        ExtractionError: The rule's selectors or transforms failed, or the
            rule matched no content.
    """
    rule = resolution if isinstance(resolution, ExtractorRule) else None

    title = _rule_text(doc, rule, "title")
    title = clean_title(title, doc.url) if title else extract_title(doc)

    date = _rule_text(doc, rule, "date_published")
    date_published = clean_date_published(date) if date else None
    if date_published is None:
        date_published = extract_date_published(doc)

    author = _rule_text(doc, rule, "author")
    author = clean_author(author) if author else extract_author(doc)

    next_page_url = _rule_text(doc, rule, "next_page_url")
    if next_page_url is None and (rule is None or rule.next_page_url is None):
        next_page_url = extract_next_page_url(
            doc.soup, doc.url, visited=visited, current_page=current_page
        )

    node = _content_node(doc, rule, title or "")
    content_text = node_text(node) if node is not None else ""

    lead_image_url = _rule_text(doc, rule, "lead_image_url") or extract_lead_image_url(doc, node)

    dek = _rule_text(doc, rule, "dek")
    dek = clean_dek(dek, content_text) if dek else extract_dek(doc, content_text)
    declared = declared_direction(doc)

    return ExtractionFields(
        url=doc.url,
        title=title,
        author=author,
        date_published=date_published,
        dek=dek,
        lead_image_url=lead_image_url,
        content=serialize_content(node, content_type),
        excerpt=excerpt_from_text(content_text),
        direction=text_direction(f"{title or ''} {content_text}", declared),
        declared_direction=declared,
        next_page_url=next_page_url,
        word_count=word_count(content_text),
        total_pages_hint=estimate_total_pages(doc.soup, doc.url),
    )
