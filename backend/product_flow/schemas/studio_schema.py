"""Studio login request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)


class LoginResponse(BaseModel):
    email: str
    redirect_to: str


class SessionInfo(BaseModel):
    email: str
    expires_at: int


class MessageResponse(BaseModel):
    message: str
