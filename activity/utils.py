from __future__ import annotations

from .models import Notification, NotificationRead


def alerts_group(course_id) -> str:
    return f"course_alerts_{course_id}"


def alert_payload(notification: Notification) -> dict:
    return {
        "type": "course.alert",
        "id": notification.id,
        "course": notification.course_id,
        "sender": notification.sender_id,
        "title": notification.title,
        "message": notification.message,
        "is_alert": notification.is_alert,
        "created_at": notification.created_at.isoformat(),
    }


def mark_read(notification: Notification, user_id) -> bool:
    """Record that ``user_id`` read the notification; True on first read only."""
    _, created = NotificationRead.objects.get_or_create(notification=notification, user_id=user_id)
    return created
