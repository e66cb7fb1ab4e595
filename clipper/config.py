"""Centralised settings for clipper.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

``Settings`` is frozen: it is built once at import time and shared read-only
by every ``parse`` call.  Per-call changes go through :meth:`Settings.override`,
which returns a new instance.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# Binary/media types that never contain article text.
_DEFAULT_BAD_CONTENT_TYPES = ("audio/mpeg", "image/gif", "image/jpeg", "image/jpg")


def _optional_float(name: str) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else None


@dataclass(frozen=True)
class Settings:
    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("CLIPPER_FETCH_TIMEOUT", "10.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("CLIPPER_USER_AGENT", _DEFAULT_USER_AGENT)
    )
    headers: dict[str, str] = field(default_factory=dict)
    fetch_retries: int = field(
        default_factory=lambda: int(os.environ.get("CLIPPER_FETCH_RETRIES", "2"))
    )
    retry_base_delay: float = field(
        default_factory=lambda: float(os.environ.get("CLIPPER_RETRY_BASE_DELAY", "0.5"))
    )

    # ------------------------------------------------------------------
    # Response validation
    # ------------------------------------------------------------------
    max_content_length: int = field(
        default_factory=lambda: int(
            os.environ.get("CLIPPER_MAX_CONTENT_LENGTH", str(5 * 1024 * 1024))
        )
    )
    bad_content_types: tuple[str, ...] = _DEFAULT_BAD_CONTENT_TYPES
    parse_non_2xx: bool = field(
        default_factory=lambda: os.environ.get("CLIPPER_PARSE_NON_2XX", "").lower()
        in ("1", "true", "yes")
    )

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------
    fetch_all_pages: bool = True
    max_pages: int = field(
        default_factory=lambda: int(os.environ.get("CLIPPER_MAX_PAGES", "25"))
    )
    pagination_budget: Optional[float] = field(
        default_factory=lambda: _optional_float("CLIPPER_PAGINATION_BUDGET")
    )

    # ------------------------------------------------------------------
    # Output / logging
    # ------------------------------------------------------------------
    content_type: str = "html"
    log_level: str = field(
        default_factory=lambda: os.environ.get("CLIPPER_LOG_LEVEL", "WARNING")
    )

    @property
    def request_headers(self) -> dict[str, str]:
        """Default outbound headers with caller-supplied headers layered on top."""
        merged = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }
        merged.update(self.headers)
        return merged

    def override(self, **changes: Any) -> "Settings":
        """Return a copy with *changes* applied; ``None`` values are ignored."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if "headers" in changes:
            changes["headers"] = {**self.headers, **changes["headers"]}
        return dataclasses.replace(self, **changes)


# Module-level singleton — import this everywhere:
#   from clipper.config import settings
settings = Settings()
