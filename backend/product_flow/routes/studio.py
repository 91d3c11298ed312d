"""Studio login routes — the session gate in front of everything else."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from ..constants import SESSION_COOKIE_NAME
from ..schemas.studio_schema import LoginRequest, LoginResponse, MessageResponse, SessionInfo
from ..services.auth_dependency import get_store, require_session
from ..services.record_store import RecordStore
from ..services.session_utils import SESSION_COOKIE_SECURE, SESSION_DURATION, create_session_token
from ..services.studio_service import resolve_login

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/studio", tags=["Studio"])


@router.post("/login", response_model=LoginResponse, summary="Log in with a studio email")
async def login(
    payload: LoginRequest,
    response: Response,
    store: RecordStore = Depends(get_store),
) -> LoginResponse:
    """Start a session for a studio member and tell the client where to go."""
    redirect_to = await resolve_login(store, payload.email)
    email = payload.email.strip().lower()

    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_session_token(email),
        max_age=int(SESSION_DURATION.total_seconds()),
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    logger.info("Studio login for %s", email)
    return LoginResponse(email=email, redirect_to=redirect_to)


@router.post("/logout", response_model=MessageResponse, summary="End the studio session")
def logout(response: Response) -> MessageResponse:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=SessionInfo, summary="Current studio session")
def me(session: dict = Depends(require_session)) -> SessionInfo:
    return SessionInfo(email=session["email"], expires_at=int(session["exp"]))
