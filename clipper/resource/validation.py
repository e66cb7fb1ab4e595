"""Response validation.

Validation here does not mean "the response was a 200"; it means we found no
reason to bail out of further processing of this URL.
"""

from __future__ import annotations

import re

from clipper.config import Settings, settings
from clipper.errors import FetchError, ValidationError
from clipper.resource.models import FetchResult


def bad_content_type_pattern(config: Settings) -> re.Pattern[str]:
    """Compile the disallowed content-type list into one case-insensitive regex."""
    alternatives = "|".join(re.escape(t) for t in config.bad_content_types)
    return re.compile(rf"^\s*(?:{alternatives})\b", re.IGNORECASE)


def validate_response(
    response: FetchResult,
    parse_non_2xx: bool = False,
    config: Settings = settings,
) -> bool:
    """Return ``True`` if *response* is worth parsing; raise otherwise.

    Checks, in order: a status code is present, the status is 2xx (unless
    *parse_non_2xx*), the content type is not disallowed, and the declared
    content length is within ``config.max_content_length``.

    Raises:
        FetchError: The response carries no status code at all.
        ValidationError: Any of the remaining checks failed.
    """
    if not response.is_success:
        if response.status_code is None:
            raise FetchError(
                f"Unable to fetch content. Original exception was {response.error}",
                url=response.url,
            )
        if not parse_non_2xx:
            raise ValidationError(
                f"Resource returned a response status code of {response.status_code} "
                "and resource was instructed to reject non-2xx level status codes.",
                url=response.url,
            )

    content_type = response.headers.get("content-type", "")
    if content_type and bad_content_type_pattern(config).search(content_type):
        raise ValidationError(
            f"Content-type for this resource was {content_type} and is not allowed.",
            url=response.url,
        )

    content_length = response.headers.get("content-length", "")
    if content_length.strip().isdigit() and int(content_length) > config.max_content_length:
        raise ValidationError(
            "Content for this resource was too large. "
            f"Maximum content length is {config.max_content_length}.",
            url=response.url,
        )

    return True
