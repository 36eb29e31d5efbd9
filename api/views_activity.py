"""Course notifications and private messages."""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db.models import Exists, OuterRef, Q
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from access.errors import NotFound
from access.guards import require
from access.policy import Action, ResourceType
from activity.models import Notification, NotificationRead
from activity.utils import mark_read
from messaging.models import Message
from .permissions import PolicyObjectMixin
from .serializers import MessageSerializer, NotificationSerializer
from .views import readable_course_ids

User = get_user_model()


class NotificationViewSet(
    PolicyObjectMixin,
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Notifications of the caller's courses, each flagged with ``is_read``."""

    queryset = Notification.objects.select_related("course")
    serializer_class = NotificationSerializer
    policy_resource = ResourceType.NOTIFICATION
    object_actions = {"retrieve": Action.READ, "read": Action.MARK_READ}
    search_fields = ["title", "message"]
    ordering_fields = ["created_at"]

    def get_queryset(self):
        reads = NotificationRead.objects.filter(notification=OuterRef("pk"), user_id=self.request.user.id)
        return super().get_queryset().annotate(is_read=Exists(reads))

    def scoped_queryset(self, queryset):
        principal = self.request.user
        if principal.is_admin:
            return queryset
        return queryset.filter(course_id__in=readable_course_ids(principal))

    def perform_create(self, serializer):
        require(self.request, Action.CREATE, ResourceType.NOTIFICATION, course_id=serializer.validated_data["course_id"])
        serializer.save(sender_id=self.request.user.id)

    @action(detail=False, methods=["get"], url_path=r"course/(?P<course_id>\d+)")
    def course(self, request, course_id=None):
        require(request, Action.READ, ResourceType.NOTIFICATION, course_id=course_id)
        qs = self.filter_queryset(self.get_queryset().filter(course_id=course_id))
        page = self.paginate_queryset(qs)
        serializer = self.get_serializer(page if page is not None else qs, many=True)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)

    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        notification = self.get_object()
        mark_read(notification, request.user.id)
        return Response({"success": True, "id": notification.pk, "is_read": True})


class MessageViewSet(
    PolicyObjectMixin,
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Private messages. Only the two parties may see a message."""

    queryset = Message.objects.select_related("sender", "recipient")
    serializer_class = MessageSerializer
    policy_resource = ResourceType.MESSAGE
    object_actions = {"retrieve": Action.READ, "destroy": Action.DELETE, "read": Action.MARK_READ}
    search_fields = ["subject", "content"]
    ordering_fields = ["created_at"]

    def scoped_queryset(self, queryset):
        me = self.request.user.id
        box = self.request.query_params.get("type", "all")
        if box == "sent":
            return queryset.filter(sender_id=me)
        if box == "received":
            return queryset.filter(recipient_id=me)
        return queryset.filter(Q(sender_id=me) | Q(recipient_id=me))

    def perform_create(self, serializer):
        require(self.request, Action.CREATE, ResourceType.MESSAGE)
        if not User.objects.filter(pk=serializer.validated_data["recipient_id"], is_active=True).exists():
            raise NotFound("Recipient not found.")
        serializer.save(sender_id=self.request.user.id)

    def _open(self, message):
        # Opening a message counts as reading it, for the recipient only
        if message.recipient_id == self.request.user.id and not message.read:
            Message.objects.filter(pk=message.pk).update(read=True)
            message.read = True
        return message

    def retrieve(self, request, *args, **kwargs):
        message = self._open(self.get_object())
        return Response(self.get_serializer(message).data)

    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        message = self._open(self.get_object())
        return Response(self.get_serializer(message).data)

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        count = Message.objects.filter(recipient_id=request.user.id, read=False).count()
        return Response({"count": count})
