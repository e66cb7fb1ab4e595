"""Async HTTP fetcher with response validation and a streaming size cap."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlsplit

import httpx

from clipper.config import Settings, settings
from clipper.errors import BadUrlError, FetchError, ValidationError
from clipper.resource.models import FetchResult
from clipper.resource.validation import validate_response

logger = logging.getLogger(__name__)


def check_url(url: str) -> str:
    """Return *url* stripped of surrounding whitespace, or raise :class:`BadUrlError`.

    Only absolute ``http``/``https`` URLs with a host are accepted.
    """
    candidate = (url or "").strip()
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
    except ValueError as exc:
        raise BadUrlError(f"Could not parse url {url!r}: {exc}", url=url) from exc
    if parts.scheme not in ("http", "https") or not host:
        raise BadUrlError(
            f"The url parameter passed does not look like a valid URL: {url!r}",
            url=url,
        )
    return candidate


def build_client(config: Settings = settings) -> httpx.AsyncClient:
    """Create the per-parse client; its cookie jar lives as long as the client."""
    return httpx.AsyncClient(
        headers=config.request_headers,
        timeout=config.fetch_timeout,
        follow_redirects=True,
    )


async def _read_capped(response: httpx.Response, limit: int, url: str) -> bytes:
    """Read the body, refusing to buffer more than *limit* bytes."""
    chunks: list[bytes] = []
    received = 0
    async for chunk in response.aiter_bytes():
        received += len(chunk)
        if received > limit:
            raise ValidationError(
                "Content for this resource was too large. "
                f"Maximum content length is {limit}.",
                url=url,
            )
        chunks.append(chunk)
    return b"".join(chunks)


async def _fetch_once(
    client: httpx.AsyncClient,
    url: str,
    config: Settings,
    parse_non_2xx: bool,
) -> FetchResult:
    async with client.stream("GET", url) as response:
        result = FetchResult(
            url=str(response.url),
            status_code=response.status_code,
            status_message=response.reason_phrase,
            headers=response.headers,
        )
        # Reject on headers before pulling the body over the wire.
        validate_response(result, parse_non_2xx=parse_non_2xx, config=config)
        result.body = await _read_capped(response, config.max_content_length, url)
    return result


async def fetch_resource(
    url: str,
    config: Settings = settings,
    client: httpx.AsyncClient | None = None,
    parse_non_2xx: bool | None = None,
) -> FetchResult:
    """Fetch *url* and return a validated :class:`FetchResult`.

    Transient transport failures are retried ``config.fetch_retries`` times
    with exponential backoff; HTTP status codes are never retried.

    Args:
        url: Absolute http(s) URL.
        config: Settings to use for timeout, headers and limits.
        client: Shared client for this parse (cookie jar propagation).  A
            throwaway client is created when omitted.
        parse_non_2xx: Accept non-2xx responses.  Defaults to
            ``config.parse_non_2xx``.

    Raises:
        BadUrlError: *url* is not a usable URL; no request is made.
        FetchError: Transport failure after all retries, a redirect loop, or
            a body that could not be decoded.
        ValidationError: The response failed validation.
    """
    url = check_url(url)
    if parse_non_2xx is None:
        parse_non_2xx = config.parse_non_2xx

    if client is None:
        async with build_client(config) as own_client:
            return await fetch_resource(url, config, own_client, parse_non_2xx)

    attempts = max(0, config.fetch_retries) + 1
    attempt = 0
    while True:
        attempt += 1
        try:
            logger.debug("GET %s (attempt %d/%d)", url, attempt, attempts)
            return await _fetch_once(client, url, config, parse_non_2xx)
        except httpx.TransportError as exc:
            if attempt >= attempts:
                raise FetchError(
                    f"Unable to fetch content. Original exception was {exc!r}",
                    url=url,
                    cause=exc,
                ) from exc
            delay = config.retry_base_delay * (2 ** (attempt - 1))
            logger.info(
                "Transient error fetching %s (%s); retrying in %.1fs", url, exc, delay
            )
            await asyncio.sleep(delay)
        except httpx.RequestError as exc:
            # Redirect loops and undecodable bodies fail the same way on every attempt.
            raise FetchError(
                f"Unable to fetch content. Original exception was {exc!r}",
                url=url,
                cause=exc,
            ) from exc


def synthetic_response(url: str, html: str) -> FetchResult:
    """Wrap caller-supplied HTML as a successful response for *url*."""
    return FetchResult(
        url=url,
        status_code=200,
        status_message="OK",
        headers=httpx.Headers({"content-type": "text/html; charset=utf-8"}),
        body=html.encode("utf-8"),
    )
