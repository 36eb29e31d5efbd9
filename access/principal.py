"""Principal Resolver: bearer credential -> authenticated `Principal`.

The resolver is the only place where a role string coming from storage is
interpreted. Legacy ``instructor`` values are folded into ``teacher``;
anything outside the closed `Role` set is treated as an unauthenticated
request rather than silently downgraded.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from accounts.models import Role, UserSession

from .errors import Unauthenticated
from .tokens import verify_access_token

logger = logging.getLogger(__name__)

User = get_user_model()

ROLE_ALIASES = {"instructor": Role.TEACHER}


@dataclass(frozen=True)
class Principal:
    """The authenticated actor of a request.

    Instances stand in for ``request.user`` inside the API, so they expose
    the small part of the Django user interface DRF relies on.
    """

    id: int
    role: Role
    session_id: str | None = None

    is_authenticated = True
    is_anonymous = False

    @property
    def pk(self) -> int:
        return self.id

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def normalize_role(value) -> Role:
    raw = str(value or "").strip().lower()
    raw = ROLE_ALIASES.get(raw, raw)
    try:
        return Role(raw)
    except ValueError:
        raise Unauthenticated("Account role is not recognised.") from None


def principal_for_user(user, session_id=None) -> Principal:
    if user.is_superuser:
        role = Role.ADMIN
    else:
        profile = getattr(user, "profile", None)
        if profile is None:
            raise Unauthenticated("Account has no profile.")
        role = normalize_role(profile.role)
    return Principal(id=user.pk, role=role, session_id=session_id)


async def resolve_principal(credential: str | None) -> Principal:
    """Verify ``credential`` and load the principal it names.

    Raises `Unauthenticated` when the credential is missing, invalid or
    expired, when the user is gone or inactive, when the login session
    behind the token was revoked, or when the stored role is unknown.
    """
    if not credential:
        raise Unauthenticated("Authentication credentials were not provided.")
    claims = verify_access_token(credential)

    try:
        user = await User.objects.select_related("profile").aget(pk=claims["sub"], is_active=True)
    except (User.DoesNotExist, ValueError, TypeError):
        logger.info("Rejected token for unknown or inactive user %s", claims.get("sub"))
        raise Unauthenticated("User no longer exists or is inactive.") from None

    session_id = claims.get("sid")
    if session_id is not None:
        try:
            # Touching the session and checking it is open is one UPDATE
            now = timezone.now()
            active = await UserSession.objects.active(now).filter(pk=session_id, user_id=user.pk).aupdate(last_active=now)
        except DjangoValidationError:
            active = False
        if not active:
            logger.info("Rejected token for closed session %s (user %s)", session_id, user.pk)
            raise Unauthenticated("Session has been closed or has expired.")

    return principal_for_user(user, session_id=session_id)
