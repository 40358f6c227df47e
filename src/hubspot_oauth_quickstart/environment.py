# src/hubspot_oauth_quickstart/environment.py
"""
HubSpot environment (QA / PROD) selection.

Credentials and URLs are always derived together from the selected environment
and published as a single immutable snapshot. A request reads the snapshot once
and uses it for every provider call it makes, so a toggle happening mid-request
never mixes QA URLs with PROD credentials.
"""

from enum import Enum
from typing import List
from urllib.parse import urlencode, quote

from pydantic import BaseModel, ConfigDict

from .config import Settings


class ConfigurationError(Exception):
    """Raised when the selected environment has no usable client credentials."""

    def __init__(self, message: str, missing: List[str]):
        super().__init__(message)
        self.message = message
        self.missing = missing


class HubSpotEnv(str, Enum):
    QA = "QA"
    PROD = "PROD"

    def toggled(self) -> "HubSpotEnv":
        return HubSpotEnv.PROD if self is HubSpotEnv.QA else HubSpotEnv.QA


class ClientCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str


class HubSpotUrls(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_base_url: str
    api_base_url: str
    authorize_url: str


class EnvironmentSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    env: HubSpotEnv
    credentials: ClientCredentials
    urls: HubSpotUrls
    redirect_uri: str


def resolve_credentials(env: HubSpotEnv, settings: Settings) -> ClientCredentials:
    if env is HubSpotEnv.QA:
        client_id, client_secret = settings.CLIENT_ID_QA, settings.CLIENT_SECRET_QA
        names = ("CLIENT_ID_QA", "CLIENT_SECRET_QA")
    else:
        client_id, client_secret = settings.CLIENT_ID_PROD, settings.CLIENT_SECRET_PROD
        names = ("CLIENT_ID_PROD", "CLIENT_SECRET_PROD")

    missing = [name for name, value in zip(names, (client_id, client_secret)) if not value]
    if missing:
        raise ConfigurationError(
            f"Missing {' / '.join(missing)} environment variable for HubSpot env {env.value}.",
            missing=missing,
        )
    return ClientCredentials(client_id=client_id, client_secret=client_secret)


def build_urls(env: HubSpotEnv, credentials: ClientCredentials, settings: Settings) -> HubSpotUrls:
    """
    Builds the authorization URL the user is sent to on install, and the API
    base URL used for token exchange and API calls.
    Only the host suffix differs between environments.
    """
    suffix = "qa" if env is HubSpotEnv.QA else ""
    app_base_url = f"https://app.hubspot{suffix}.com"
    api_base_url = f"https://api.hubapi{suffix}.com"

    query = urlencode(
        {
            "client_id": credentials.client_id,  # app's client ID
            "scope": settings.SCOPE_STRING,  # scopes being requested by the app
            "redirect_uri": settings.REDIRECT_URI,  # where to send the user after the consent page
        },
        safe="",
        quote_via=quote,
    )
    return HubSpotUrls(
        app_base_url=app_base_url,
        api_base_url=api_base_url,
        authorize_url=f"{app_base_url}/oauth/authorize?{query}",
    )


def build_snapshot(env: HubSpotEnv, settings: Settings) -> EnvironmentSnapshot:
    credentials = resolve_credentials(env, settings)
    return EnvironmentSnapshot(
        env=env,
        credentials=credentials,
        urls=build_urls(env, credentials, settings),
        redirect_uri=settings.REDIRECT_URI,
    )


class EnvironmentSelector:
    """Holds the active snapshot. toggle() swaps it in one assignment."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._snapshot = build_snapshot(HubSpotEnv(settings.HUBSPOT_ENV), settings)
        print(f"ENVIRONMENT: Active HubSpot env: {self._snapshot.env.value}")

    @property
    def current(self) -> EnvironmentSnapshot:
        return self._snapshot

    def toggle(self) -> EnvironmentSnapshot:
        # Build everything for the new env before publishing it; on
        # ConfigurationError the current snapshot stays active.
        new_snapshot = build_snapshot(self._snapshot.env.toggled(), self._settings)
        self._snapshot = new_snapshot
        print(f"ENVIRONMENT: Toggled HubSpot env to {new_snapshot.env.value}")
        return new_snapshot
