"""
Shared fixtures: a clean runtime configuration per test and a fake transport.
"""

import pytest

from sp_rest_client.runtime.config import reset_config, setup
from sp_rest_client.transport import RawResponse


WEB_URL = "https://contoso.sharepoint.com/sites/dev"


class FakeClient:
    """Transport double recording every fetch."""

    def __init__(self, response: RawResponse):
        self.response = response
        self.calls = []

    async def fetch(self, url, options=None):
        self.calls.append((url, options))
        return self.response


@pytest.fixture(autouse=True)
def _clean_config():
    """Every test starts from the default runtime configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def web_url():
    return WEB_URL


@pytest.fixture
def configured(web_url):
    """Runtime configuration with a base url."""
    return setup(base_url=web_url)


@pytest.fixture
def fake_client():
    """Fake transport installed as the client factory, answering with a verbose OData payload."""
    client = FakeClient(RawResponse(status=200, reason="OK", body=b'{"d": {"Title": "Tasks"}}'))
    setup(base_url=WEB_URL, fetch_client_factory=lambda: client)
    return client
