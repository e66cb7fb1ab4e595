"""Extractors package — rule resolution, custom rules and generic heuristics."""

from clipper.extractors.registry import default_registry
from clipper.extractors.resolver import GENERIC, base_domain, resolve_extractor
from clipper.extractors.root import extract_page
from clipper.extractors.rules import ExtractorRule, FieldRule, InMemoryRegistry, RuleRegistry

__all__ = [
    "GENERIC",
    "base_domain",
    "resolve_extractor",
    "extract_page",
    "default_registry",
    "ExtractorRule",
    "FieldRule",
    "InMemoryRegistry",
    "RuleRegistry",
]
