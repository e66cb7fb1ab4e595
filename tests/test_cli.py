"""Tests for the clipper CLI (parse / domain commands)."""

import json

import pytest
from typer.testing import CliRunner

from cli.main import app

from tests.pages import ARTICLE_URL, PARAGRAPHS, article_html

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep basicConfig from binding a handler to the runner's temporary stderr."""
    monkeypatch.setattr("cli.main._configure_logging", lambda verbose: None)


@pytest.fixture
def article_file(tmp_path):
    path = tmp_path / "article.html"
    path.write_text(article_html(), encoding="utf-8")
    return path


def test_parse_from_html_file(article_file):
    result = runner.invoke(app, ["parse", ARTICLE_URL, "--html-file", str(article_file), "--first-page-only"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["title"] == "The connected renter"
    assert data["rendered_pages"] == 1
    assert data["domain"] == "example.com"
    assert PARAGRAPHS[0] in data["content"]


def test_parse_text_format(article_file):
    result = runner.invoke(
        app, ["parse", ARTICLE_URL, "--html-file", str(article_file), "--first-page-only", "--format", "text"]
    )

    assert result.exit_code == 0
    assert "<p>" not in json.loads(result.stdout)["content"]


def test_parse_bad_url_exits_nonzero():
    result = runner.invoke(app, ["parse", "foo.com"])

    assert result.exit_code == 1
    data = json.loads(result.stdout)
    assert data["error"] is True
    assert data["error_message"] == "BadUrl"


def test_parse_unknown_format():
    result = runner.invoke(app, ["parse", ARTICLE_URL, "--format", "xml"])
    assert result.exit_code == 2


def test_parse_rejects_malformed_header(article_file):
    result = runner.invoke(
        app, ["parse", ARTICLE_URL, "--html-file", str(article_file), "--first-page-only", "-H", "no-colon"]
    )
    assert result.exit_code == 2


def test_parse_rejects_zero_max_pages():
    result = runner.invoke(app, ["parse", ARTICLE_URL, "--max-pages", "0"])
    assert result.exit_code == 2


def test_domain_custom_rule():
    result = runner.invoke(app, ["domain", "https://www.arstechnica.com/gadgets/2016/08/x/"])

    assert result.exit_code == 0
    assert "www.arstechnica.com" in result.stdout
    assert "custom (arstechnica.com)" in result.stdout


def test_domain_generic():
    result = runner.invoke(app, ["domain", "https://news.example.co/story"])

    assert result.exit_code == 0
    assert "example.co" in result.stdout
    assert "generic" in result.stdout


def test_domain_not_a_url():
    result = runner.invoke(app, ["domain", "not a url"])
    assert result.exit_code == 1
