from __future__ import annotations

import django_filters
from django.contrib.auth import get_user_model

from accounts.models import Role
from assignments.models import Grade
from events.models import CalendarEvent, EventType

User = get_user_model()


class UserFilter(django_filters.FilterSet):
    role = django_filters.ChoiceFilter(field_name="profile__role", choices=Role.choices)

    class Meta:
        model = User
        fields = ["role", "is_active"]


class GradeFilter(django_filters.FilterSet):
    class Meta:
        model = Grade
        fields = ["course", "student", "assignment"]


class CalendarEventFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=EventType.choices)
    start_after = django_filters.IsoDateTimeFilter(field_name="start", lookup_expr="gte")
    start_before = django_filters.IsoDateTimeFilter(field_name="start", lookup_expr="lte")

    class Meta:
        model = CalendarEvent
        fields = ["type", "course", "start_after", "start_before"]
