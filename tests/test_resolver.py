"""Tests for clipper.extractors.resolver and the rule registry."""

from __future__ import annotations

import pytest

from clipper.extractors.registry import ARS_TECHNICA, WIKIPEDIA, default_registry
from clipper.extractors.resolver import GENERIC, base_domain, hostname, resolve_extractor
from clipper.extractors.rules import ExtractorRule, FieldRule, InMemoryRegistry


# ---------------------------------------------------------------------------
# base_domain / hostname
# ---------------------------------------------------------------------------

class TestBaseDomain:
    @pytest.mark.parametrize(
        "host, expected",
        [
            ("example.com", "example.com"),
            ("www.example.com", "example.com"),
            ("a.b.example.com", "example.com"),
            ("WWW.Example.COM.", "example.com"),
            ("example.com:8080", "example.com"),
            ("localhost", "localhost"),
        ],
    )
    def test_last_two_labels(self, host: str, expected: str) -> None:
        assert base_domain(host) == expected

    @pytest.mark.parametrize("host", ["example.com", "a.b.example.com", "news.bbc.co.uk", "x.y."])
    def test_idempotent(self, host: str) -> None:
        once = base_domain(host)
        assert base_domain(once) == once

    def test_subdomains_share_a_base(self) -> None:
        assert base_domain("a.b.example.com") == base_domain("c.example.com") == "example.com"

    def test_hostname_is_lowercased(self) -> None:
        assert hostname("https://News.Example.COM/path?q=1") == "news.example.com"
        assert hostname("not a url") == ""


# ---------------------------------------------------------------------------
# resolve_extractor
# ---------------------------------------------------------------------------

class TestResolveExtractor:
    def test_exact_hostname_match(self) -> None:
        rule = ExtractorRule(domain="blog.example.com", title=FieldRule(selectors=("h1",)))
        registry = InMemoryRegistry([rule])
        assert resolve_extractor("https://blog.example.com/post/1", registry) is rule

    def test_hostname_beats_base_domain(self) -> None:
        specific = ExtractorRule(domain="blog.example.com")
        general = ExtractorRule(domain="example.com")
        registry = InMemoryRegistry([general, specific])
        assert resolve_extractor("https://blog.example.com/post", registry) is specific
        assert resolve_extractor("https://shop.example.com/item", registry) is general

    def test_base_domain_fallback(self) -> None:
        assert resolve_extractor("https://arstechnica.com/gadgets/2016/08/x/", default_registry) is ARS_TECHNICA
        assert resolve_extractor("https://www.arstechnica.com/a/", default_registry) is ARS_TECHNICA

    def test_supported_domains_share_the_rule(self) -> None:
        assert resolve_extractor("https://en.wikipedia.org/wiki/Article", default_registry) is WIKIPEDIA
        assert resolve_extractor("https://de.wikipedia.org/wiki/Artikel", default_registry) is WIKIPEDIA

    def test_no_fuzzy_matching(self) -> None:
        registry = InMemoryRegistry([ExtractorRule(domain="example.com")])
        assert resolve_extractor("https://notexample.com/a", registry) is GENERIC
        assert resolve_extractor("https://example.com.evil.net/a", registry) is GENERIC

    def test_unknown_domain_is_generic(self) -> None:
        assert resolve_extractor("https://unknown-site.test/a", default_registry) is GENERIC


class TestGenericMarker:
    def test_singleton_and_falsy(self) -> None:
        assert not GENERIC
        assert repr(GENERIC) == "GENERIC"
        assert type(GENERIC)() is GENERIC


class TestInMemoryRegistry:
    def test_register_indexes_every_domain(self) -> None:
        registry = InMemoryRegistry()
        rule = ExtractorRule(domain="example.com", supported_domains=("example.org", "Example.Net"))
        registry.register(rule)

        assert len(registry) == 3
        assert "example.net" in registry
        assert registry.lookup("EXAMPLE.ORG") is rule
        assert registry.lookup("example.edu") is None
