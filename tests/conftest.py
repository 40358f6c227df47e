import json
import os
from urllib.parse import parse_qs

# Settings are instantiated when the package is imported, so the required
# credentials must be present before any test module imports it.
os.environ.setdefault("CLIENT_ID_PROD", "prod-client-id")
os.environ.setdefault("CLIENT_SECRET_PROD", "prod-client-secret")
os.environ.setdefault("NODE_ENV", "localhost")

import httpx
import pytest

from hubspot_oauth_quickstart.config import Settings
from hubspot_oauth_quickstart.environment import HubSpotEnv, build_snapshot


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeHubSpot:
    """Stands in for HubSpot's token and contacts endpoints via httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.token_responses = []
        self.contacts_response = (200, {"contacts": [
            {"vid": 51, "properties": {"firstname": {"value": "Ada"}, "lastname": {"value": "Lovelace"}}}
        ]})

    def queue_token(self, status_code=200, body=None):
        self.token_responses.append((status_code, body))

    @property
    def token_requests(self):
        return [r for r in self.requests if r.url.path == "/oauth/v1/token"]

    @property
    def contact_requests(self):
        return [r for r in self.requests if r.url.path.startswith("/contacts/")]

    @staticmethod
    def form(request: httpx.Request) -> dict:
        return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/oauth/v1/token":
            status_code, body = self.token_responses.pop(0)
        elif request.url.path.startswith("/contacts/"):
            status_code, body = self.contacts_response
        else:
            status_code, body = 404, {"status": "error", "message": "not found"}
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, content=json.dumps(body).encode(),
                              headers={"Content-Type": "application/json"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def build_settings(**overrides) -> Settings:
    values = dict(
        HUBSPOT_ENV="PROD",
        CLIENT_ID_PROD="prod-client-id",
        CLIENT_SECRET_PROD="prod-client-secret",
        CLIENT_ID_QA="qa-client-id",
        CLIENT_SECRET_QA="qa-client-secret",
        SCOPE="contacts",
        NODE_ENV="localhost",
        PORT=3000,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def make_settings():
    """Factory for Settings with test credentials; keyword arguments override fields."""
    return build_settings


@pytest.fixture
def settings():
    return build_settings()


@pytest.fixture
def prod_snapshot(settings):
    return build_snapshot(HubSpotEnv.PROD, settings)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hubspot():
    return FakeHubSpot()
