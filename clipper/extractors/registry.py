"""Bundled sample rules and the default registry.

The rule library proper is data maintained outside this package; these few
entries exist so the custom-rule path works out of the box.  Applications
add their own with ``default_registry.register(rule)``.
"""

from __future__ import annotations

from bs4 import Tag

from clipper.extractors.rules import ExtractorRule, FieldRule, InMemoryRegistry


def _unwrap_noscript_image(node: Tag) -> str | None:
    """Lazy-loaded figures keep the real ``<img>`` inside ``<noscript>``."""
    noscript = node.find("noscript")
    if noscript is not None:
        noscript.unwrap()
    return "figure"


ARS_TECHNICA = ExtractorRule(
    domain="arstechnica.com",
    title=FieldRule(selectors=("header h1", "h1")),
    author=FieldRule(selectors=("*[rel='author'] *[itemprop='name']", "a[rel='author']")),
    date_published=FieldRule(selectors=(("time[datetime]", "datetime"),)),
    dek=FieldRule(selectors=("h2[itemprop='description']", "header h2")),
    lead_image_url=FieldRule(selectors=(("meta[property='og:image']", "content"),)),
    content=FieldRule(
        selectors=("div[itemprop='articleBody']", "div.article-content"),
        clean=("figcaption .enlarge-link", "figcaption .sep", "figure.video", ".gallery", "aside"),
        transforms={"h2": "h4"},
    ),
    next_page_url=FieldRule(
        selectors=(("nav.page-numbers span.next a", "href"), ("a.next.page-numbers", "href")),
    ),
)

WIKIPEDIA = ExtractorRule(
    domain="wikipedia.org",
    title=FieldRule(selectors=("h2.title", "h1#firstHeading")),
    date_published=FieldRule(selectors=(("#footer-info-lastmod", "title"),)),
    content=FieldRule(
        selectors=("#mw-content-text",),
        clean=(
            ".mw-editsection",
            "figure tr, figure td, figure tbody",
            "#toc",
            ".navbox",
            ".reflist",
            ".mw-references-wrap",
        ),
        transforms={".infobox img": "figure"},
        default_cleaner=False,
    ),
    supported_domains=("en.wikipedia.org",),
)

BLOGGER = ExtractorRule(
    domain="blogspot.com",
    title=FieldRule(selectors=(".post-title", "h3.entry-title")),
    author=FieldRule(selectors=(".post-author-name", ".post-author .fn")),
    date_published=FieldRule(selectors=(("span.publishdate", "title"), "h2.date-header")),
    content=FieldRule(
        selectors=(".post-content noscript", ".post-body"),
        clean=(".post-footer", ".blog-pager"),
        transforms={"div.separator": _unwrap_noscript_image},
    ),
)

SAMPLE_RULES = (ARS_TECHNICA, WIKIPEDIA, BLOGGER)

default_registry = InMemoryRegistry(SAMPLE_RULES)
