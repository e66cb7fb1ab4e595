"""Map a URL to the rule that should extract it."""

from __future__ import annotations

import logging
from typing import Final, Union
from urllib.parse import urlsplit

from clipper.extractors.rules import ExtractorRule, RuleRegistry

logger = logging.getLogger(__name__)


class _GenericMarker:
    """Sentinel meaning "no custom rule; use the heuristic extractor"."""

    _instance = None

    def __new__(cls) -> "_GenericMarker":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "GENERIC"

    def __bool__(self) -> bool:
        return False


GENERIC: Final = _GenericMarker()

Resolution = Union[ExtractorRule, _GenericMarker]


def hostname(url: str) -> str:
    return (urlsplit(url).hostname or "").lower().rstrip(".")


def base_domain(host: str) -> str:
    """Return the last two labels of *host*.

    ``foo.bar.example.com`` becomes ``example.com``.  Ports and trailing dots
    are dropped, so the function is idempotent.
    """
    host = host.lower().strip().rstrip(".")
    host = host.rsplit("@", 1)[-1].split(":", 1)[0]
    return ".".join(host.split(".")[-2:])


def resolve_extractor(url: str, registry: RuleRegistry) -> Resolution:
    """Look up a rule for *url*: full hostname first, then the registrable domain.

    Only exact matches count; anything else resolves to :data:`GENERIC`.
    """
    host = hostname(url)
    for candidate in dict.fromkeys((host, base_domain(host))):
        rule = registry.lookup(candidate)
        if rule is not None:
            logger.debug("Resolved %s to custom rule %s", url, rule.domain)
            return rule
    logger.debug("No custom rule for %s; using generic extractor", url)
    return GENERIC
