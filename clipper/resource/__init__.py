"""Resource package — fetch, validate and normalise a single page."""

from clipper.resource.fetcher import build_client, check_url, fetch_resource, synthetic_response
from clipper.resource.models import FetchResult, ParsedDocument
from clipper.resource.normalizer import build_document, normalize
from clipper.resource.validation import validate_response

__all__ = [
    "build_client",
    "check_url",
    "fetch_resource",
    "synthetic_response",
    "validate_response",
    "normalize",
    "build_document",
    "FetchResult",
    "ParsedDocument",
]
