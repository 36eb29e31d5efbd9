"""Calendar events, optionally tied to a course."""
from __future__ import annotations

from django.conf import settings
from django.db import models


class EventType(models.TextChoices):
    ASSIGNMENT = "assignment", "Assignment"
    EXAM = "exam", "Exam"
    CLASS = "class", "Class"
    MEETING = "meeting", "Meeting"
    OTHER = "other", "Other"


class CalendarEvent(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    start = models.DateTimeField()
    end = models.DateTimeField()
    all_day = models.BooleanField(default=False)
    type = models.CharField(max_length=16, choices=EventType.choices, default=EventType.OTHER)
    course = models.ForeignKey("courses.Course", on_delete=models.SET_NULL, null=True, blank=True, related_name="events")
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="created_events")
    participants = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name="calendar_events")
    color = models.CharField(max_length=7, default="#3788d8")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["start", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.title} @ {self.start:%Y-%m-%d}"
