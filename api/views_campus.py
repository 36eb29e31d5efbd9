"""News and calendar events."""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from access.errors import NotFound
from access.guards import require
from access.policy import Action, ResourceType
from events.models import CalendarEvent
from news.models import News
from news.utils import set_visibility
from .filters import CalendarEventFilter
from .permissions import CollectionPolicy, IsAuthenticatedPrincipal, PolicyObjectMixin
from .serializers import CalendarEventSerializer, NewsSerializer, VisibilitySerializer

User = get_user_model()


class NewsViewSet(PolicyObjectMixin, viewsets.ModelViewSet):
    """Published news is public; everything else is for administrators."""

    queryset = News.objects.select_related("author")
    serializer_class = NewsSerializer
    policy_resource = ResourceType.NEWS
    collection_actions = {"all_news": Action.LIST, "create": Action.CREATE}
    object_actions = {**PolicyObjectMixin.object_actions, "visibility": Action.TOGGLE_VISIBILITY}
    public_actions = ("list", "retrieve", "visible")
    search_fields = ["title", "content"]
    ordering_fields = ["created_at", "updated_at", "title"]

    def get_permissions(self):
        if self.action in self.public_actions:
            return [AllowAny()]
        return [IsAuthenticatedPrincipal(), CollectionPolicy()]

    def scoped_queryset(self, queryset):
        return queryset.filter(is_published=True)

    @action(detail=False, methods=["get"], url_path="all")
    def all_news(self, request):
        return super().list(request)

    @action(detail=False, methods=["get"])
    def visible(self, request):
        item = self.get_queryset().filter(is_visible=True, is_published=True).first()
        if item is None:
            raise NotFound("No news item is currently visible.")
        return Response(self.get_serializer(item).data)

    @transaction.atomic
    def perform_create(self, serializer):
        visible = serializer.validated_data.pop("is_visible", False)
        news = serializer.save(author_id=self.request.user.id)
        if visible:
            set_visibility(news, True)

    @transaction.atomic
    def perform_update(self, serializer):
        visible = serializer.validated_data.pop("is_visible", None)
        news = serializer.save()
        if visible is not None and visible != news.is_visible:
            set_visibility(news, visible)

    @action(detail=True, methods=["post"])
    def visibility(self, request, pk=None):
        news = self.get_object()
        data = VisibilitySerializer(data=request.data)
        data.is_valid(raise_exception=True)
        news = set_visibility(news, data.validated_data["is_visible"])
        return Response(self.get_serializer(news).data)


class CalendarEventViewSet(PolicyObjectMixin, viewsets.ModelViewSet):
    queryset = CalendarEvent.objects.prefetch_related("participants")
    serializer_class = CalendarEventSerializer
    policy_resource = ResourceType.EVENT
    filterset_class = CalendarEventFilter
    search_fields = ["title", "description"]
    ordering_fields = ["start", "end", "created_at"]

    def scoped_queryset(self, queryset):
        principal = self.request.user
        if principal.is_admin:
            return queryset
        invited = CalendarEvent.participants.through.objects.filter(user_id=principal.id).values("calendarevent_id")
        return queryset.filter(Q(created_by_id=principal.id) | Q(pk__in=invited))

    def _check_course(self, serializer):
        # Linking an event to a course requires being able to read the course
        course_id = serializer.validated_data.get("course_id")
        if course_id is not None:
            require(self.request, Action.READ, ResourceType.COURSE, course_id)

    def perform_create(self, serializer):
        require(self.request, Action.CREATE, ResourceType.EVENT)
        self._check_course(serializer)
        serializer.save(created_by_id=self.request.user.id)

    def perform_update(self, serializer):
        self._check_course(serializer)
        serializer.save()
