"""Login session helpers: open a session for a login request."""
from __future__ import annotations

import re

from django.db.models import Q
from django.utils import timezone

from access.tokens import access_token_ttl, issue_access_token

from .models import DeviceType, UserSession

_MOBILE = re.compile(r"mobile", re.IGNORECASE)
_TABLET = re.compile(r"tablet|ipad", re.IGNORECASE)


def detect_device_type(user_agent: str) -> str:
    if _MOBILE.search(user_agent or ""):
        return DeviceType.MOBILE
    if _TABLET.search(user_agent or ""):
        return DeviceType.TABLET
    return DeviceType.COMPUTER


def client_ip(request) -> str | None:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.META.get("REMOTE_ADDR") or None


def open_session(user, request) -> tuple[UserSession, str]:
    """Record a new login session and issue its bearer token.

    Closed and expired sessions of the user are purged at the same time so
    the table only grows with live logins.
    """
    now = timezone.now()
    UserSession.objects.filter(user=user).filter(Q(expires_at__lte=now) | Q(revoked_at__isnull=False)).delete()

    user_agent = request.META.get("HTTP_USER_AGENT", "")
    session = UserSession.objects.create(
        user=user,
        device_type=detect_device_type(user_agent),
        device_name=user_agent[:255],
        ip_address=client_ip(request),
        last_active=now,
        expires_at=now + access_token_ttl(),
    )
    token = issue_access_token(user.pk, session.pk, expires_at=session.expires_at)
    return session, token
