# app/shared/auth.py
from fastapi import Depends, Header, Request

from app.shared.errors import InvalidOrExpired, Unauthorized
from app.shared.sessions import SessionRegistry


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_current_user_id(
    authorization: str | None = Header(default=None, alias="Authorization"),
    sessions: SessionRegistry = Depends(get_sessions),
) -> str:
    # Always require a bearer token
    if not authorization:
        raise Unauthorized("authorization required")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise Unauthorized("invalid authorization format")

    try:
        return sessions.validate_token(parts[1])
    except InvalidOrExpired as e:
        raise Unauthorized(f"authentication failed: {e.message}")
