"""FastAPI dependencies — the injected record store and the studio session gate."""

from __future__ import annotations

from fastapi import Cookie, HTTPException, Request, status

from ..constants import SESSION_COOKIE_NAME
from .record_store import RecordStore
from .session_utils import decode_session_token


def get_store(request: Request) -> RecordStore:
    """Return the record store the app was built with."""
    return request.app.state.store


def require_session(
    studio_session: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> dict:
    """Validate the studio session cookie.

    Returns the decoded session payload.
    Raises 401 if the cookie is missing, invalid, or expired.
    """
    if not studio_session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    payload = decode_session_token(studio_session)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )

    return payload
