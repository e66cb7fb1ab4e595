"""clipper CLI — extract an article from the command line.

Usage:
    python cli/main.py --help

Commands:
    parse   → run the full extraction pipeline and print the result as JSON
    domain  → show the registrable domain and which extractor would handle a URL
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from clipper.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
import logging
from typing import List, Optional

import typer

from clipper.config import settings
from clipper.errors import ErrorResult
from clipper.extractors import GENERIC, base_domain, default_registry, resolve_extractor
from clipper.extractors.resolver import hostname
from clipper.parser import parse_sync

app = typer.Typer(
    name="clipper",
    help="Extract clean article content from web pages.",
    no_args_is_help=True,
)


def _parse_headers(values: List[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected 'Name: value', got {value!r}", param_hint="--header")
        headers[name.strip()] = content.strip()
    return headers


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


@app.command("parse")
def parse_cmd(
    url: str = typer.Argument(..., help="Article URL."),
    html_file: Optional[Path] = typer.Option(
        None, "--html-file", exists=True, dir_okay=False, help="Parse this HTML instead of fetching the first page."
    ),
    first_page_only: bool = typer.Option(False, "--first-page-only", help="Do not follow next-page links."),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", min=1, help="Upper bound on pages rendered."),
    header: List[str] = typer.Option([], "--header", "-H", help="Extra request header, 'Name: value'. Repeatable."),
    parse_non_2xx: bool = typer.Option(False, "--parse-non-2xx", help="Accept non-2xx responses as content."),
    output_format: str = typer.Option("html", "--format", help="Content format: html | text."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline decisions to stderr."),
) -> None:
    """Extract the article at URL and print it as JSON."""
    if output_format not in ("html", "text"):
        typer.echo(f"[parse] Unknown format {output_format!r}. Use: html | text", err=True)
        raise typer.Exit(2)
    _configure_logging(verbose)

    html = html_file.read_text(encoding="utf-8") if html_file else None
    result = parse_sync(
        url,
        html,
        fetch_all_pages=not first_page_only,
        max_pages=max_pages,
        headers=_parse_headers(header) or None,
        parse_non_2xx=parse_non_2xx or None,
        content_type=output_format,
    )

    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    if isinstance(result, ErrorResult):
        raise typer.Exit(1)


@app.command("domain")
def domain_cmd(
    url: str = typer.Argument(..., help="Any URL."),
) -> None:
    """Show the registrable domain of URL and the extractor that would handle it."""
    host = hostname(url)
    if not host:
        typer.echo(f"[domain] Not a URL: {url!r}")
        raise typer.Exit(1)
    resolution = resolve_extractor(url, default_registry)
    extractor = "generic" if resolution is GENERIC else f"custom ({resolution.domain})"
    typer.echo(f"[domain] Host      : {host}")
    typer.echo(f"[domain] Domain    : {base_domain(host)}")
    typer.echo(f"[domain] Extractor : {extractor}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
