"""Assignments, submissions and grades.

An `Assignment` belongs to a course and closes at ``due_date``. Each
student keeps at most one `Submission` per assignment; resubmitting
before the due date replaces it. A `Grade` records a mark for a student
in a course, optionally for a specific assignment.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from courses.models import Course


class Assignment(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="assignments")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    due_date = models.DateTimeField()
    points = models.PositiveIntegerField(default=100)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["due_date", "id"]

    def __str__(self) -> str:
        return f"{self.title} ({self.course_id})"


class Submission(models.Model):
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, related_name="submissions")
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="submissions")
    submitted_at = models.DateTimeField(default=timezone.now)
    # [{"file_name": ..., "file_url": ...}]
    attachments = models.JSONField(default=list, blank=True)
    comment = models.TextField(blank=True)
    grade = models.FloatField(null=True, blank=True)
    feedback = models.TextField(blank=True)

    class Meta:
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(fields=["assignment", "student"], name="unique_submission_per_student"),
        ]

    def __str__(self) -> str:
        return f"Submission by {self.student_id} on {self.assignment_id}"


class Grade(models.Model):
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="grades")
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="grades")
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, null=True, blank=True, related_name="grades")
    grade = models.FloatField()
    max_grade = models.FloatField(default=100.0)
    feedback = models.TextField(blank=True)
    graded_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="grades_given")
    graded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-graded_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["assignment", "student"],
                condition=Q(assignment__isnull=False),
                name="unique_assignment_grade",
            ),
        ]

    def __str__(self) -> str:
        return f"Grade {self.grade}/{self.max_grade} for {self.student_id} in {self.course_id}"
