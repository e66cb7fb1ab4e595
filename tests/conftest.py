"""Shared fixtures."""

from __future__ import annotations

import pytest

from clipper.config import Settings


@pytest.fixture
def config() -> Settings:
    """Settings with retries disabled so transport-error tests fail fast."""
    return Settings(fetch_retries=0, retry_base_delay=0.0, max_pages=25, pagination_budget=None)
