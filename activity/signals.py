from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from materials.models import Material
from .models import Notification
from .utils import alert_payload, alerts_group

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Material)
def notify_material(sender, instance: Material, created: bool, **kwargs):
    if not created:
        return
    # Informational only: not pushed as an alert
    Notification.objects.create(
        course=instance.course,
        sender=instance.uploaded_by,
        title="New material",
        message=f"New material in {instance.course.title}: {instance.title}",
        is_alert=False,
    )


@receiver(post_save, sender=Notification)
def broadcast_alert(sender, instance: Notification, created: bool, **kwargs):
    if not created or not instance.is_alert:
        return
    layer = get_channel_layer()
    if layer is None:
        return
    payload = alert_payload(instance)
    group = alerts_group(instance.course_id)

    def _send():
        async_to_sync(layer.group_send)(group, {"type": "course_alert", "payload": payload})
        logger.debug("Broadcast alert %s to %s", payload["id"], group)

    transaction.on_commit(_send)
