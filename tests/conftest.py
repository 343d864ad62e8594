"""Shared test fixtures."""

import pytest

from cooked.config import Settings
from helpers import API_URL, CDN_URL


@pytest.fixture
def settings() -> Settings:
    """Test settings pointed at the fake API."""
    return Settings(sleeper_api_url=API_URL, sleeper_cdn_url=CDN_URL, _env_file=None)
