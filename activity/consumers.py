from __future__ import annotations

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from access.errors import NotFound
from access.policy import Action, ResourceType, authorize
from access.relationships import course_relationships
from .utils import alerts_group

CLOSE_UNAUTHENTICATED = 4001
CLOSE_FORBIDDEN = 4003
CLOSE_NOT_FOUND = 4004


class CourseAlertsConsumer(AsyncJsonWebsocketConsumer):
    """Live feed of alerts posted to one course.

    Only principals allowed to read the course's notifications may join;
    the check runs once at connect time.
    """

    group_name = None

    async def connect(self):
        self.course_id = int(self.scope["url_route"]["kwargs"]["course_id"])
        principal = self.scope.get("principal")
        try:
            facts = await course_relationships(self.course_id)
        except NotFound:
            await self.close(code=CLOSE_NOT_FOUND)
            return
        decision = authorize(principal, Action.READ, ResourceType.NOTIFICATION, facts)
        if not decision:
            await self.close(code=CLOSE_UNAUTHENTICATED if decision.unauthenticated else CLOSE_FORBIDDEN)
            return
        self.group_name = alerts_group(self.course_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def receive_json(self, content, **kwargs):
        # Read-only feed
        return

    async def course_alert(self, event):
        await self.send_json(event["payload"])

    async def disconnect(self, code):
        if self.group_name:
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
