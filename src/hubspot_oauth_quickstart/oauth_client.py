# src/hubspot_oauth_quickstart/oauth_client.py
"""
Exchanges proof (an authorization code or a refresh token) for a fresh
access/refresh token pair at HubSpot's token endpoint.
"""

import typing

import httpx
from pydantic import BaseModel, ValidationError

from .environment import EnvironmentSnapshot
from .results import Ok, Err, ProviderError, Result
from .token_store import TokenStore, access_token_ttl

TOKEN_PATH = "/oauth/v1/token"


class AuthorizationCodeProof(BaseModel):
    grant_type: typing.Literal["authorization_code"] = "authorization_code"
    client_id: str
    client_secret: str
    redirect_uri: str
    code: str


class RefreshTokenProof(BaseModel):
    grant_type: typing.Literal["refresh_token"] = "refresh_token"
    client_id: str
    client_secret: str
    redirect_uri: str
    refresh_token: str


ExchangeProof = typing.Union[AuthorizationCodeProof, RefreshTokenProof]


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int


def build_authorization_code_proof(snapshot: EnvironmentSnapshot, code: str) -> AuthorizationCodeProof:
    return AuthorizationCodeProof(
        client_id=snapshot.credentials.client_id,
        client_secret=snapshot.credentials.client_secret,
        redirect_uri=snapshot.redirect_uri,
        code=code,
    )


def build_refresh_token_proof(snapshot: EnvironmentSnapshot, refresh_token: str) -> RefreshTokenProof:
    return RefreshTokenProof(
        client_id=snapshot.credentials.client_id,
        client_secret=snapshot.credentials.client_secret,
        redirect_uri=snapshot.redirect_uri,
        refresh_token=refresh_token,
    )


def parse_provider_error(response: httpx.Response) -> ProviderError:
    """Turns a failed HubSpot response into a ProviderError, whatever its body looks like."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        try:
            return ProviderError.model_validate(body)
        except ValidationError:
            pass
    text = response.text[:500] if response.text else ""
    return ProviderError(message=f"HTTP {response.status_code} from HubSpot: {text}".strip())


class OAuthExchangeClient:
    def __init__(
            self,
            refresh_store: TokenStore,
            access_cache: TokenStore,
            expiry_factor: float = 0.75,
            timeout: float = 10.0,
            transport: typing.Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.refresh_store = refresh_store
        self.access_cache = access_cache
        self.expiry_factor = expiry_factor
        self.timeout = timeout
        self.transport = transport

    async def exchange(self, session_id: str, proof: ExchangeProof, snapshot: EnvironmentSnapshot) -> Result[str]:
        """
        POSTs the proof as a form body to the token endpoint.
        On success both tokens are stored for session_id and Ok(access_token) is returned.
        On any failure nothing is stored and Err(provider_error) is returned.
        """
        token_url = f"{snapshot.urls.api_base_url}{TOKEN_PATH}"
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(token_url, data=proof.model_dump())
        except httpx.RequestError as e:
            print(f"OAUTH_CLIENT:        > Error exchanging {proof.grant_type} for access token: {e!r}")
            return Err(ProviderError(message=f"Could not reach HubSpot token endpoint: {e}"))

        if response.is_error:
            print(f"OAUTH_CLIENT:        > Error exchanging {proof.grant_type} for access token "
                  f"(HTTP {response.status_code})")
            return Err(parse_provider_error(response))

        try:
            tokens = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            print(f"OAUTH_CLIENT:        > Malformed token response for {proof.grant_type}: {e}")
            return Err(ProviderError(message=f"Malformed token response from HubSpot: {response.text[:200]}"))

        # Usually this token data would be persisted and tied to a user identity.
        self.refresh_store.set(session_id, tokens.refresh_token)
        self.access_cache.set(
            session_id,
            tokens.access_token,
            ttl=access_token_ttl(tokens.expires_in, self.expiry_factor),
        )
        print("OAUTH_CLIENT:        > Received an access token and refresh token")
        return Ok(tokens.access_token)
