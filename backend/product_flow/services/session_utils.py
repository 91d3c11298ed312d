"""Studio session tokens — signed JWTs carried in the ``studio_session`` cookie.

Rules
-----
- NO hardcoded secrets in production — SESSION_SECRET from the environment
- Emails are lower-cased before they go into a token
- An invalid or expired token decodes to ``None``; it never raises
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

_SESSION_SECRET = os.getenv("SESSION_SECRET", "product-flow-dev-secret-change-in-production")
_SESSION_ALGORITHM = "HS256"
SESSION_DURATION = timedelta(days=int(os.getenv("SESSION_DURATION_DAYS", "7")))
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"


def create_session_token(email: str, now: Optional[datetime] = None) -> str:
    """Create a signed session token for *email*."""
    issued = now or datetime.now(timezone.utc)
    payload = {
        "email": email.strip().lower(),
        "iat": int(issued.timestamp()),
        "exp": int((issued + SESSION_DURATION).timestamp()),
    }
    return jwt.encode(payload, _SESSION_SECRET, algorithm=_SESSION_ALGORITHM)


def decode_session_token(token: str) -> Optional[dict]:
    """Decode and validate a session token. Returns payload dict or None."""
    try:
        payload = jwt.decode(token, _SESSION_SECRET, algorithms=[_SESSION_ALGORITHM])
    except JWTError:
        return None
    if not payload.get("email"):
        return None
    return payload
