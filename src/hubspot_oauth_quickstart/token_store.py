# src/hubspot_oauth_quickstart/token_store.py
"""
Per-session token storage.

Tokens live in process memory only and are lost on restart. Anything that
implements TokenStore (get/set/delete by session ID) can replace the
in-memory version, e.g. a database-backed store for refresh tokens.
"""

import math
import time
import typing


class TokenStore(typing.Protocol):
    def get(self, session_id: str) -> typing.Optional[str]:
        ...

    def set(self, session_id: str, token: str, ttl: typing.Optional[float] = None) -> None:
        ...

    def delete(self, session_id: str) -> None:
        ...


class InMemoryTokenStore:
    """
    Dict-backed TokenStore. Entries stored with a ttl are removed once the
    clock reaches their expiry; entries without a ttl live for the process
    lifetime.
    """

    def __init__(self, clock: typing.Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: typing.Dict[str, typing.Tuple[str, typing.Optional[float]]] = {}

    def _is_expired(self, expires_at: typing.Optional[float]) -> bool:
        if expires_at is None:
            return False
        return self._clock() >= expires_at

    def _live_entry(self, session_id: str) -> typing.Optional[typing.Tuple[str, typing.Optional[float]]]:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if self._is_expired(entry[1]):
            del self._entries[session_id]
            return None
        return entry

    def get(self, session_id: str) -> typing.Optional[str]:
        entry = self._live_entry(session_id)
        return entry[0] if entry else None

    def set(self, session_id: str, token: str, ttl: typing.Optional[float] = None) -> None:
        expires_at = None if ttl is None else self._clock() + ttl
        # Expired entries are dropped on every write as well as on read.
        self.purge_expired()
        self._entries[session_id] = (token, expires_at)

    def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

    def expires_at(self, session_id: str) -> typing.Optional[float]:
        entry = self._live_entry(session_id)
        return entry[1] if entry else None

    def purge_expired(self) -> int:
        expired = [key for key, (_, expires_at) in self._entries.items() if self._is_expired(expires_at)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __contains__(self, session_id: str) -> bool:
        return self._live_entry(session_id) is not None

    def __len__(self) -> int:
        self.purge_expired()
        return len(self._entries)


def access_token_ttl(expires_in: float, factor: float) -> int:
    """Cache lifetime for an access token: factor * expires_in, rounded half up."""
    return int(math.floor(expires_in * factor + 0.5))
