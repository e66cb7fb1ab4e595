"""Tests for clipper.extractors.generic.fields

trafilatura's metadata reader is only reached when no meta tag, selector or
URL carries a date; the one test that relies on it patches
``trafilatura.extract_metadata``.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from bs4 import BeautifulSoup

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
from clipper.resource.normalizer import build_document

URL = "https://example.com/gadgets/story"


def _doc(html: str, url: str = URL):
    return build_document(html, url)


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

class TestTitle:
    def test_site_suffix_removed(self) -> None:
        assert clean_title("The connected renter | Example", URL) == "The connected renter"

    def test_site_prefix_removed(self) -> None:
        assert clean_title("Example — Breaking story here", URL) == "Breaking story here"

    def test_breadcrumb_keeps_longest_part(self) -> None:
        title = "News | Technology | Why renters love smart plugs"
        assert clean_title(title, "https://other.org/a") == "Why renters love smart plugs"

    def test_unrelated_two_part_title_untouched(self) -> None:
        assert clean_title("Chicago - A City Guide", URL) == "Chicago - A City Guide"

    def test_whitespace_collapsed(self) -> None:
        assert clean_title("  Plain \n  title  ") == "Plain title"

    def test_og_title_preferred_over_h1(self) -> None:
        doc = _doc('<head><meta property="og:title" content="From meta"></head><body><h1>From h1</h1></body>')
        assert extract_title(doc) == "From meta"

    def test_single_h1_used(self) -> None:
        doc = _doc("<head><title>Doc title | Example</title></head><body><h1>Headline</h1></body>")
        assert extract_title(doc) == "Headline"

    def test_falls_back_to_document_title(self) -> None:
        doc = _doc("<head><title>Doc title | Example</title></head><body><h1>One</h1><h1>Two</h1></body>")
        assert extract_title(doc) == "Doc title"

    def test_no_title(self) -> None:
        assert extract_title(_doc("<body><p>nothing here</p></body>")) is None


# ---------------------------------------------------------------------------
# Author
# ---------------------------------------------------------------------------

class TestAuthor:
    @pytest.mark.parametrize(
        "raw, expected",
        [("By Jane Doe", "Jane Doe"), ("Posted by: Sam Lee", "Sam Lee"), ("  Ana   Ruiz ", "Ana Ruiz")],
    )
    def test_clean_author(self, raw: str, expected: str) -> None:
        assert clean_author(raw) == expected

    def test_overlong_author_rejected(self) -> None:
        assert clean_author("x" * 301) is None

    def test_meta_author(self) -> None:
        assert extract_author(_doc('<meta name="author" content="Jane Doe"><p>x</p>')) == "Jane Doe"

    def test_url_valued_meta_skipped(self) -> None:
        html = (
            '<meta property="article:author" content="https://facebook.com/jane">'
            '<div class="byline">By Alex Smith</div>'
        )
        assert extract_author(_doc(html)) == "Alex Smith"

    def test_no_author(self) -> None:
        assert extract_author(_doc("<p>Anonymous text</p>")) is None


# ---------------------------------------------------------------------------
# Date published
# ---------------------------------------------------------------------------

class TestDatePublished:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2016-08-16T12:00:00Z", "2016-08-16T12:00:00+00:00"),
            ("2015-03-02T08:00:00-05:00", "2015-03-02T13:00:00+00:00"),
            ("1471305600", "2016-08-16T00:00:00+00:00"),
            ("1471305600000", "2016-08-16T00:00:00+00:00"),
            ("Published on: August 16, 2016", "2016-08-16T00:00:00+00:00"),
        ],
    )
    def test_clean_date_published(self, raw: str, expected: str) -> None:
        assert clean_date_published(raw) == expected

    @pytest.mark.parametrize("raw", ["", "unknown", "1969-07-20"])
    def test_unusable_dates(self, raw: str) -> None:
        assert clean_date_published(raw) is None

    def test_meta_tag(self) -> None:
        doc = _doc('<meta property="article:published_time" content="2016-08-16T12:00:00Z"><p>x</p>')
        assert extract_date_published(doc) == "2016-08-16T12:00:00+00:00"

    def test_time_element(self) -> None:
        doc = _doc('<p>Posted <time datetime="2015-03-02T08:00:00-05:00">March 2</time></p>')
        assert extract_date_published(doc) == "2015-03-02T13:00:00+00:00"

    def test_date_in_url(self) -> None:
        doc = _doc("<p>No dates in markup.</p>", url="https://example.com/2016/08/16/story/")
        assert extract_date_published(doc) == "2016-08-16T00:00:00+00:00"

    def test_trafilatura_fallback(self) -> None:
        with patch(
            "clipper.extractors.generic.fields.trafilatura.extract_metadata",
            return_value=SimpleNamespace(date="2014-01-01"),
        ) as extract_metadata:
            result = extract_date_published(_doc("<p>No dates in markup.</p>"))

        assert result == "2014-01-01T00:00:00+00:00"
        assert extract_metadata.call_args.kwargs["default_url"] == URL

    def test_nothing_found(self) -> None:
        with patch("clipper.extractors.generic.fields.trafilatura.extract_metadata", return_value=None):
            assert extract_date_published(_doc("<p>No dates in markup.</p>")) is None


# ---------------------------------------------------------------------------
# Dek
# ---------------------------------------------------------------------------

class TestDek:
    def test_meta_description(self) -> None:
        doc = _doc('<meta name="description" content="A short guide to gear you can take with you.">')
        assert extract_dek(doc, "Renting an apartment used to mean...") == "A short guide to gear you can take with you."

    def test_dek_repeating_content_opening_rejected(self) -> None:
        assert clean_dek("Renting an apartment used to mean…", "Renting an apartment used to mean living with") is None

    def test_length_bounds(self) -> None:
        assert clean_dek("Hi") is None
        assert clean_dek("x" * 1001) is None


# ---------------------------------------------------------------------------
# Lead image
# ---------------------------------------------------------------------------

class TestLeadImage:
    def test_og_image(self) -> None:
        doc = _doc('<meta property="og:image" content="https://example.com/lead.jpg"><p>x</p>')
        assert extract_lead_image_url(doc) == "https://example.com/lead.jpg"

    def test_image_src_link(self) -> None:
        doc = _doc('<link rel="image_src" href="/img/lead.png"><p>x</p>')
        assert extract_lead_image_url(doc) == "https://example.com/img/lead.png"

    def test_best_content_image(self) -> None:
        html = (
            '<div><img src="/icons/share-icon.png" width="16" height="16">'
            '<img src="/wp-content/uploads/lead.jpg" width="640" height="480" alt="Lead"></div>'
        )
        doc = _doc(html)
        assert extract_lead_image_url(doc, doc.soup.div) == "https://example.com/wp-content/uploads/lead.jpg"

    def test_only_negative_images(self) -> None:
        doc = _doc('<div><img src="/icons/logo.gif" width="16" height="16"></div>')
        assert extract_lead_image_url(doc, doc.soup.div) is None


# ---------------------------------------------------------------------------
# Excerpt / word count / direction
# ---------------------------------------------------------------------------

class TestDerivedFields:
    def test_short_excerpt_unchanged(self) -> None:
        assert excerpt_from_text("  A short   text. ") == "A short text."

    def test_long_excerpt_cut_on_word_boundary(self) -> None:
        text = " ".join(["renter"] * 100)
        excerpt = excerpt_from_text(text)
        assert excerpt.endswith("renter…")
        assert len(excerpt) <= 201

    def test_word_count(self) -> None:
        assert word_count("one two\n three") == 3
        assert word_count("") == 0

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Plain English text", "ltr"),
            ("שלום עולם, זהו מאמר", "rtl"),
            ("مقالة باللغة العربية with two words", "rtl"),
        ],
    )
    def test_text_direction(self, text: str, expected: str) -> None:
        assert text_direction(text) == expected

    def test_declared_direction_wins(self) -> None:
        doc = _doc('<html dir="RTL"><body><p>English words only</p></body></html>')
        declared = declared_direction(doc)
        assert text_direction("English words only", declared) == "rtl"

    def test_no_declared_direction(self) -> None:
        assert declared_direction(_doc("<p>x</p>")) is None
