from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from access.errors import Conflict

from .models import News

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Another news item is already visible. Hide it first."


def _visible_other(news_id):
    return News.objects.filter(is_visible=True).exclude(pk=news_id).values_list("pk", flat=True).first()


def set_visibility(news: News, visible: bool) -> News:
    """Show or hide ``news``; refuse to show a second item.

    Raises `Conflict` carrying the id of the item that is already visible.
    Hiding always succeeds.
    """
    now = timezone.now()
    if not visible:
        News.objects.filter(pk=news.pk).update(is_visible=False, updated_at=now)
    else:
        try:
            with transaction.atomic():
                other = _visible_other(news.pk)
                if other is not None:
                    raise Conflict(CONFLICT_MESSAGE, conflict_id=other)
                News.objects.filter(pk=news.pk).update(is_visible=True, updated_at=now)
        except IntegrityError:
            # Lost a race against a concurrent toggle
            raise Conflict(CONFLICT_MESSAGE, conflict_id=_visible_other(news.pk)) from None
    logger.info("News %s visibility set to %s", news.pk, visible)
    news.refresh_from_db(fields=["is_visible", "updated_at"])
    return news
