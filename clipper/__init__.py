"""clipper — extract clean article records from web pages.

Public re-exports so callers can write::

    from clipper import parse

    result = await parse("https://example.com/story")
"""

from clipper.config import Settings, settings
from clipper.errors import ErrorKind, ErrorResult
from clipper.models import ParseResult
from clipper.parser import parse, parse_sync

__all__ = ["parse", "parse_sync", "Settings", "settings", "ParseResult", "ErrorResult", "ErrorKind"]
