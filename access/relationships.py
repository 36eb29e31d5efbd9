"""Resource Relationship Lookup.

Turns ``(resource_type, resource_id)`` into the `Relationships` facts the
decision engine reasons about. Child resources (materials, assignments,
grades and notifications) have no access list of their own: their facts
are the parent course's, resolved parent-first, so a child whose course
has gone away is reported as missing.

All lookups are read-only and use Django's async ORM.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError

from activity.models import Notification
from assignments.models import Assignment, Grade
from courses.models import Course, Enrolment
from events.models import CalendarEvent
from materials.models import Material
from messaging.models import Message
from news.models import News

from .errors import NotFound
from .policy import ResourceType

User = get_user_model()

_LOOKUP_ERRORS = (ValueError, TypeError, DjangoValidationError)


@dataclass(frozen=True)
class Relationships:
    owner_id: int | None = None
    participant_ids: frozenset = field(default_factory=frozenset)
    course_id: int | None = None
    # Grades: the student the grade is about.
    subject_id: int | None = None
    # Assignments: submissions are accepted up to and including this instant.
    due_date: datetime | None = None
    # News only.
    is_published: bool | None = None


NO_RELATIONSHIPS = Relationships()


async def _values(model, resource_id, *fields, label: str):
    try:
        return await model.objects.values(*fields).aget(pk=resource_id)
    except (model.DoesNotExist, *_LOOKUP_ERRORS):
        raise NotFound(f"{label} not found.") from None


async def course_relationships(course_id) -> Relationships:
    row = await _values(Course, course_id, "id", "instructor_id", label="Course")
    students = Enrolment.objects.filter(course_id=row["id"]).values_list("student_id", flat=True)
    return Relationships(
        owner_id=row["instructor_id"],
        participant_ids=frozenset([sid async for sid in students]),
        course_id=row["id"],
    )


async def _material(material_id) -> Relationships:
    row = await _values(Material, material_id, "course_id", label="Material")
    return await course_relationships(row["course_id"])


async def _assignment(assignment_id) -> Relationships:
    row = await _values(Assignment, assignment_id, "course_id", "due_date", label="Assignment")
    facts = await course_relationships(row["course_id"])
    return dataclasses.replace(facts, due_date=row["due_date"])


async def _grade(grade_id) -> Relationships:
    row = await _values(Grade, grade_id, "course_id", "student_id", label="Grade")
    facts = await course_relationships(row["course_id"])
    return dataclasses.replace(facts, subject_id=row["student_id"])


async def _notification(notification_id) -> Relationships:
    row = await _values(Notification, notification_id, "course_id", label="Notification")
    return await course_relationships(row["course_id"])


async def _message(message_id) -> Relationships:
    row = await _values(Message, message_id, "sender_id", "recipient_id", label="Message")
    return Relationships(owner_id=row["sender_id"], participant_ids=frozenset([row["recipient_id"]]))


async def _news(news_id) -> Relationships:
    row = await _values(News, news_id, "is_published", label="News")
    return Relationships(is_published=row["is_published"])


async def _event(event_id) -> Relationships:
    row = await _values(CalendarEvent, event_id, "id", "created_by_id", "course_id", label="Event")
    participants = User.objects.filter(calendar_events=row["id"]).values_list("pk", flat=True)
    return Relationships(
        owner_id=row["created_by_id"],
        participant_ids=frozenset([uid async for uid in participants]),
        course_id=row["course_id"],
    )


async def _user(user_id) -> Relationships:
    row = await _values(User, user_id, "id", label="User")
    return Relationships(owner_id=row["id"])


_LOADERS = {
    ResourceType.COURSE: course_relationships,
    ResourceType.MATERIAL: _material,
    ResourceType.ASSIGNMENT: _assignment,
    ResourceType.GRADE: _grade,
    ResourceType.NOTIFICATION: _notification,
    ResourceType.MESSAGE: _message,
    ResourceType.NEWS: _news,
    ResourceType.EVENT: _event,
    ResourceType.USER: _user,
}


async def relationships_for(resource_type, resource_id) -> Relationships:
    """Facts about one resource; raises `NotFound` if it (or its course) is missing."""
    loader = _LOADERS[ResourceType(resource_type)]
    return await loader(resource_id)
