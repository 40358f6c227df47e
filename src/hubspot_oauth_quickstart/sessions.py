# src/hubspot_oauth_quickstart/sessions.py

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse

# Only a random session ID lives in the browser cookie. It is the key for the
# refresh token store and the access token cache; the middleware itself keeps
# no per-session state.
SESSION_COOKIE_NAME = "session_id"


def is_valid_session_id(value: str) -> bool:
    try:
        return str(uuid.UUID(value)) == value
    except (TypeError, ValueError):
        return False


class SessionMiddlewareCustom(BaseHTTPMiddleware):
    def __init__(self, app, max_age: int = 60 * 60 * 4, secure: bool = False):
        super().__init__(app)
        self.max_age = max_age
        self.secure = secure

    async def dispatch(self, request, call_next):
        session_id = request.cookies.get(SESSION_COOKIE_NAME)
        if not session_id or not is_valid_session_id(session_id):
            session_id = str(uuid.uuid4())
        request.state.session_id = session_id
        response: StarletteResponse = await call_next(request)
        response.set_cookie(
            SESSION_COOKIE_NAME,
            session_id,
            max_age=self.max_age,
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )
        return response


def get_session_id(request: Request) -> str:
    """Session identity for the token lifecycle. Tests override this dependency."""
    return request.state.session_id
