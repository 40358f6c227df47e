import asyncio

from hubspot_oauth_quickstart.oauth_client import OAuthExchangeClient, build_authorization_code_proof
from hubspot_oauth_quickstart.results import Ok, Err
from hubspot_oauth_quickstart.token_accessor import SessionTokenAccessor
from hubspot_oauth_quickstart.token_store import InMemoryTokenStore


def make_accessor(hubspot, clock):
    refresh_store = InMemoryTokenStore(clock=clock)
    access_cache = InMemoryTokenStore(clock=clock)
    exchange_client = OAuthExchangeClient(refresh_store, access_cache, transport=hubspot.transport)
    return SessionTokenAccessor(refresh_store, access_cache, exchange_client)


def authorize(accessor, snapshot, session_id="s1"):
    proof = build_authorization_code_proof(snapshot, "code")
    return asyncio.run(accessor.exchange_client.exchange(session_id, proof, snapshot))


def test_is_authorized_only_after_successful_exchange(hubspot, clock, prod_snapshot):
    accessor = make_accessor(hubspot, clock)
    assert not accessor.is_authorized("s1")

    hubspot.queue_token(400, {"status": "error", "message": "bad code"})
    authorize(accessor, prod_snapshot)
    assert not accessor.is_authorized("s1")

    hubspot.queue_token(body={"access_token": "A", "refresh_token": "R", "expires_in": 100})
    authorize(accessor, prod_snapshot)
    assert accessor.is_authorized("s1")
    assert not accessor.is_authorized("s2")


def test_unauthorized_session_gets_no_token_and_no_refresh(hubspot, clock, prod_snapshot):
    accessor = make_accessor(hubspot, clock)
    assert asyncio.run(accessor.get_access_token("s1", prod_snapshot)) is None
    assert hubspot.token_requests == []


def test_cached_token_until_ttl_then_one_refresh(hubspot, clock, prod_snapshot):
    accessor = make_accessor(hubspot, clock)
    hubspot.queue_token(body={"access_token": "A", "refresh_token": "R", "expires_in": 100})
    authorize(accessor, prod_snapshot)

    assert asyncio.run(accessor.get_access_token("s1", prod_snapshot)) == Ok("A")
    clock.advance(74)
    assert asyncio.run(accessor.get_access_token("s1", prod_snapshot)) == Ok("A")
    assert len(hubspot.token_requests) == 1

    clock.advance(1)
    hubspot.queue_token(body={"access_token": "B", "refresh_token": "R2", "expires_in": 100})
    assert asyncio.run(accessor.get_access_token("s1", prod_snapshot)) == Ok("B")
    assert asyncio.run(accessor.get_access_token("s1", prod_snapshot)) == Ok("B")

    assert len(hubspot.token_requests) == 2
    refresh_form = hubspot.form(hubspot.token_requests[1])
    assert refresh_form["grant_type"] == "refresh_token"
    assert refresh_form["refresh_token"] == "R"
    assert accessor.refresh_store.get("s1") == "R2"


def test_revoked_refresh_token_surfaces_as_error(hubspot, clock, prod_snapshot):
    accessor = make_accessor(hubspot, clock)
    hubspot.queue_token(body={"access_token": "A", "refresh_token": "R", "expires_in": 100})
    authorize(accessor, prod_snapshot)
    clock.advance(100)

    hubspot.queue_token(400, {"status": "BAD_REFRESH_TOKEN", "message": "missing or invalid refresh token"})
    result = asyncio.run(accessor.get_access_token("s1", prod_snapshot))

    assert isinstance(result, Err)
    assert result.message == "missing or invalid refresh token"
    # Still counts as authorized; the stale refresh token is kept.
    assert accessor.is_authorized("s1")
