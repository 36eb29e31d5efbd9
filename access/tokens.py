"""Bearer token issue/verify helpers (HS256 JWT via python-jose).

Tokens carry the user id as ``sub`` and, for tokens issued at login, the
id of the `accounts.UserSession` they belong to as ``sid``. Signature and
expiry checking is delegated entirely to python-jose.
"""
from __future__ import annotations

from datetime import datetime, timedelta

from django.conf import settings
from django.utils import timezone
from jose import JWTError, jwt

from .errors import Unauthenticated


def access_token_ttl() -> timedelta:
    return timedelta(minutes=settings.JWT_ACCESS_TTL_MINUTES)


def issue_access_token(user_id, session_id=None, *, expires_at: datetime | None = None) -> str:
    now = timezone.now()
    expires_at = expires_at or now + access_token_ttl()
    claims = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    if session_id is not None:
        claims["sid"] = str(session_id)
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_access_token(token: str) -> dict:
    """Return the verified claims or raise `Unauthenticated`."""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise Unauthenticated("Invalid or expired token.") from exc
    if not claims.get("sub"):
        raise Unauthenticated("Invalid or expired token.")
    return claims
