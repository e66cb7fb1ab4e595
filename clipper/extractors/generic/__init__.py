"""Heuristic extraction used when no custom rule matches a domain."""

from clipper.extractors.generic.content import extract_content
from clipper.extractors.generic.next_page import extract_next_page_url

__all__ = ["extract_content", "extract_next_page_url"]
