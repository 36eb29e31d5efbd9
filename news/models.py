"""Campus news.

Any number of items can be published, but at most one is *visible* (the
featured item shown on the landing page). The partial unique constraint
keeps that true even when two administrators toggle visibility at once.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q


class News(models.Model):
    title = models.CharField(max_length=200)
    content = models.TextField()
    image = models.CharField(max_length=500, blank=True)
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="news")
    is_published = models.BooleanField(default=True)
    is_visible = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "news"
        constraints = [
            models.UniqueConstraint(fields=["is_visible"], condition=Q(is_visible=True), name="single_visible_news"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.title
