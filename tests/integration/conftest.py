"""Integration test fixtures for the live Conduit API.

Tests in this directory talk to a running Conduit backend. They are
skipped unless API_URL and either ACCESS_TOKEN or EMAIL/PASSWORD are
configured (environment or env/.env.<ENVIRONMENT>).
"""

import pytest

from conduit_testkit.config.settings import Settings


@pytest.fixture(autouse=True)
def require_live_api(testkit_settings: Settings) -> None:
    """Skip when no live API is configured."""
    if not testkit_settings.api_url:
        pytest.skip("API_URL is not configured")
    if not (testkit_settings.access_token or testkit_settings.has_credentials):
        pytest.skip("ACCESS_TOKEN or EMAIL/PASSWORD is not configured")
