"""Accounts models: user profile, roles and login sessions.

Defines a `UserProfile` associated one-to-one with Django's `User`,
capturing the role (student/teacher/admin) and optional contact fields.
The profile is created automatically on user creation.

Each successful login opens a `UserSession`; the bearer token issued for
it names the session, so closing the session invalidates the token.
"""
from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Role(models.TextChoices):
    """Closed set of platform roles consulted by the access engine."""

    STUDENT = "student", "Student"
    TEACHER = "teacher", "Teacher"
    ADMIN = "admin", "Admin"


class UserProfile(models.Model):
    """Profile linked to a Django auth user."""

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT)

    full_name = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.CharField(max_length=255, blank=True)
    student_number = models.CharField(max_length=50, blank=True)
    program = models.CharField(max_length=200, blank=True)
    year_of_admission = models.PositiveSmallIntegerField(null=True, blank=True)
    avatar_url = models.URLField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover (string repr convenience)
        return f"Profile<{self.user.username}:{self.role}>"


class DeviceType(models.TextChoices):
    COMPUTER = "computer", "Computer"
    MOBILE = "mobile", "Mobile"
    TABLET = "tablet", "Tablet"


class UserSessionQuerySet(models.QuerySet):
    def active(self, now=None):
        now = now or timezone.now()
        return self.filter(revoked_at__isnull=True, expires_at__gt=now)

    def revoke(self, now=None) -> int:
        """Close every open session in the queryset with one UPDATE."""
        return self.filter(revoked_at__isnull=True).update(revoked_at=now or timezone.now())


class UserSession(models.Model):
    """A login session (one per issued token)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="login_sessions")
    device_type = models.CharField(max_length=16, choices=DeviceType.choices, default=DeviceType.COMPUTER)
    device_name = models.CharField(max_length=255, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_active = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()
    revoked_at = models.DateTimeField(null=True, blank=True)

    objects = UserSessionQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "revoked_at"], name="session_user_revoked_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"Session<{self.user_id}:{self.device_type}>"
