from hubspot_oauth_quickstart.token_store import InMemoryTokenStore, access_token_ttl


def test_entry_without_ttl_never_expires(clock):
    store = InMemoryTokenStore(clock=clock)
    store.set("s1", "refresh")
    clock.advance(10 ** 9)
    assert store.get("s1") == "refresh"
    assert store.expires_at("s1") is None


def test_entry_with_ttl_is_removed_at_expiry(clock):
    store = InMemoryTokenStore(clock=clock)
    store.set("s1", "access", ttl=75)
    assert store.expires_at("s1") == 75

    clock.advance(74)
    assert store.get("s1") == "access"

    clock.advance(1)
    assert store.get("s1") is None
    assert "s1" not in store


def test_set_overwrites_and_delete_removes(clock):
    store = InMemoryTokenStore(clock=clock)
    store.set("s1", "old", ttl=10)
    store.set("s1", "new")
    assert store.get("s1") == "new"
    assert store.expires_at("s1") is None

    store.delete("s1")
    store.delete("missing")
    assert store.get("s1") is None


def test_purge_expired(clock):
    store = InMemoryTokenStore(clock=clock)
    store.set("a", "1", ttl=5)
    store.set("b", "2", ttl=50)
    store.set("c", "3")
    clock.advance(10)
    assert store.purge_expired() == 1
    assert len(store) == 2


def test_zero_ttl_is_already_expired(clock):
    store = InMemoryTokenStore(clock=clock)
    store.set("s1", "access", ttl=0)
    assert store.get("s1") is None


def test_access_token_ttl_rounds_half_up():
    assert access_token_ttl(100, 0.75) == 75
    assert access_token_ttl(21600, 0.75) == 16200
    assert access_token_ttl(2, 0.75) == 2
    assert access_token_ttl(1, 0.5) == 1


def test_set_drops_expired_entries_of_other_sessions(clock):
    store = InMemoryTokenStore(clock=clock)
    for i in range(100):
        store.set(f"abandoned-{i}", "access", ttl=75)
    clock.advance(75)

    store.set("s1", "fresh", ttl=75)

    assert list(store._entries) == ["s1"]
