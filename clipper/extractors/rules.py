"""Per-domain extraction rules and the registry interface they are looked up through.

A rule field is described by a :class:`FieldRule`:

``selectors``
    Tried in order; the first that yields a value wins.  A plain CSS string
    takes the matched node's text (or the node itself for ``content``); a
    ``(css, attribute)`` pair takes the attribute value.
``clean``
    CSS selectors removed from the matched node before it is serialised.
``transforms``
    Mapping of CSS selector to either a tag name (the match is renamed) or a
    callable receiving the matched :class:`bs4.Tag`.  A callable that returns
    a string renames the node to that tag.
``default_cleaner``
    Run the generic cleaner over the result (content and text fields).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Protocol, Union

from bs4 import Tag

Selector = Union[str, tuple[str, str]]
Transform = Union[str, Callable[[Tag], Optional[str]]]


@dataclass(frozen=True)
class FieldRule:
    selectors: tuple[Selector, ...] = ()
    clean: tuple[str, ...] = ()
    transforms: Mapping[str, Transform] = field(default_factory=dict)
    default_cleaner: bool = True


@dataclass(frozen=True)
class ExtractorRule:
    domain: str
    title: Optional[FieldRule] = None
    author: Optional[FieldRule] = None
    date_published: Optional[FieldRule] = None
    dek: Optional[FieldRule] = None
    lead_image_url: Optional[FieldRule] = None
    content: Optional[FieldRule] = None
    next_page_url: Optional[FieldRule] = None
    supported_domains: tuple[str, ...] = ()

    def field_rule(self, name: str) -> Optional[FieldRule]:
        return getattr(self, name, None)

    @property
    def domains(self) -> tuple[str, ...]:
        return (self.domain, *self.supported_domains)


class RuleRegistry(Protocol):
    """Anything that can map a domain to a rule."""

    def lookup(self, domain: str) -> Optional[ExtractorRule]:
        ...


class InMemoryRegistry:
    """Dict-backed registry indexing each rule under all of its domains."""

    def __init__(self, rules: tuple[ExtractorRule, ...] | list[ExtractorRule] = ()) -> None:
        self._rules: dict[str, ExtractorRule] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: ExtractorRule) -> None:
        for domain in rule.domains:
            self._rules[domain.lower()] = rule

    def lookup(self, domain: str) -> Optional[ExtractorRule]:
        return self._rules.get(domain.lower())

    def __contains__(self, domain: str) -> bool:
        return domain.lower() in self._rules

    def __len__(self) -> int:
        return len(self._rules)
