"""Activity models: course notifications and read receipts.

A `Notification` is posted to a whole course. Who has read it is tracked
by `NotificationRead` rows, one per ``(notification, user)``, so marking
a notification read is an insert-if-absent and never rewrites a list.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Notification(models.Model):
    course = models.ForeignKey("courses.Course", on_delete=models.CASCADE, related_name="notifications")
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="sent_notifications")
    title = models.CharField(max_length=200)
    message = models.TextField()
    # Alerts are pushed live to connected course members.
    is_alert = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.course_id}:{self.title[:20]}"


class NotificationRead(models.Model):
    notification = models.ForeignKey(Notification, on_delete=models.CASCADE, related_name="reads")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notification_reads")
    read_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["notification", "user"], name="unique_notification_read"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.user_id} read {self.notification_id}"
