"""Materials models and validators.

Defines `Material`, a file attached to a course by its instructor.
Uploads are limited to 50 MB and to document, spreadsheet, slide,
image and archive types.
"""
from __future__ import annotations

import mimetypes
from pathlib import Path

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from courses.models import Course


ALLOWED_MIME = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/zip",
    "application/x-zip-compressed",
    "application/x-rar-compressed",
    "application/vnd.rar",
}
ALLOWED_EXT = {
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".txt", ".jpg", ".jpeg", ".png", ".gif", ".zip", ".rar",
}
MAX_BYTES = 50 * 1024 * 1024


def validate_upload(file) -> None:
    """Validate file size and a conservative type check.

    The extension must be on the allow-list; when the platform can guess
    a MIME type from the filename, that must be allowed too.
    """
    size = getattr(file, "size", None)
    if size is not None and size > MAX_BYTES:
        raise ValidationError("File too large (max 50 MB)")
    ext = Path(getattr(file, "name", "")).suffix.lower()
    if ext not in ALLOWED_EXT:
        raise ValidationError("Unsupported file type")
    guessed, _ = mimetypes.guess_type(getattr(file, "name", ""))
    if guessed and guessed not in ALLOWED_MIME:
        raise ValidationError("Unsupported MIME type")


class Material(models.Model):
    """A file attached to a course."""

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="materials")
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="materials")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    file = models.FileField(upload_to="materials/", validators=[validate_upload])
    size_bytes = models.PositiveIntegerField(default=0)
    mime = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        # Derive size and MIME from the stored file for listings.
        if self.file:
            self.size_bytes = self.file.size or 0
            self.mime = mimetypes.guess_type(self.file.name)[0] or ""
        super().save(*args, **kwargs)

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.title} ({self.course_id})"
