# src/hubspot_oauth_quickstart/token_accessor.py

import typing

from .environment import EnvironmentSnapshot
from .oauth_client import OAuthExchangeClient, build_refresh_token_proof
from .results import Ok, Result
from .token_store import TokenStore


class SessionTokenAccessor:
    """Hands out a valid access token for a session, refreshing it when the cached one has expired."""

    def __init__(self, refresh_store: TokenStore, access_cache: TokenStore, exchange_client: OAuthExchangeClient):
        self.refresh_store = refresh_store
        self.access_cache = access_cache
        self.exchange_client = exchange_client

    def is_authorized(self, session_id: str) -> bool:
        # Only checks that a refresh token was stored. A revoked token shows
        # up later as an Err from the refresh exchange.
        return bool(self.refresh_store.get(session_id))

    async def refresh_access_token(self, session_id: str, snapshot: EnvironmentSnapshot) -> typing.Optional[Result[str]]:
        refresh_token = self.refresh_store.get(session_id)
        if not refresh_token:
            return None
        proof = build_refresh_token_proof(snapshot, refresh_token)
        return await self.exchange_client.exchange(session_id, proof, snapshot)

    async def get_access_token(self, session_id: str, snapshot: EnvironmentSnapshot) -> typing.Optional[Result[str]]:
        """
        Returns Ok(token) from the cache while it is live. On a miss, exchanges
        the stored refresh token for a new pair. Returns None when the session
        was never authorized.
        """
        cached = self.access_cache.get(session_id)
        if cached:
            return Ok(cached)
        if not self.is_authorized(session_id):
            return None
        print("TOKEN_ACCESSOR: Refreshing expired access token")
        return await self.refresh_access_token(session_id, snapshot)
