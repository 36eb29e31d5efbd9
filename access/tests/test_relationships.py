from __future__ import annotations

import pytest
from asgiref.sync import async_to_sync
from django.core.files.uploadedfile import SimpleUploadedFile

from access.errors import NotFound
from access.policy import ResourceType
from access.relationships import relationships_for
from activity.models import Notification
from assignments.models import Grade
from events.models import CalendarEvent
from materials.models import Material
from messaging.models import Message
from news.models import News
from access.tests.factories import enrol, make_assignment, make_course, make_user

lookup = async_to_sync(relationships_for)


@pytest.fixture
def classroom(db):
    teacher = make_user("rel_t", role="teacher")
    s1 = make_user("rel_s1")
    s2 = make_user("rel_s2")
    course = make_course(teacher)
    enrol(course, s1, s2)
    return teacher, s1, s2, course


def test_course_owner_and_participants(classroom):
    teacher, s1, s2, course = classroom
    facts = lookup(ResourceType.COURSE, course.pk)
    assert facts.owner_id == teacher.pk
    assert facts.participant_ids == frozenset({s1.pk, s2.pk})
    assert facts.course_id == course.pk


def test_children_inherit_course_facts(classroom):
    teacher, s1, s2, course = classroom
    material = Material.objects.create(
        course=course, uploaded_by=teacher, title="Slides",
        file=SimpleUploadedFile("slides.pdf", b"%PDF-1.4\n"),
    )
    assignment = make_assignment(course)
    grade = Grade.objects.create(student=s1, course=course, assignment=assignment, grade=80)
    notification = Notification.objects.create(course=course, sender=teacher, title="Hi", message="Welcome")

    for kind, pk in (
        (ResourceType.MATERIAL, material.pk),
        (ResourceType.ASSIGNMENT, assignment.pk),
        (ResourceType.GRADE, grade.pk),
        (ResourceType.NOTIFICATION, notification.pk),
    ):
        facts = lookup(kind, pk)
        assert facts.owner_id == teacher.pk
        assert facts.participant_ids == frozenset({s1.pk, s2.pk})

    assert lookup(ResourceType.ASSIGNMENT, assignment.pk).due_date == assignment.due_date
    assert lookup(ResourceType.GRADE, grade.pk).subject_id == s1.pk


def test_children_of_a_deleted_course_are_not_found(classroom):
    teacher, _, _, course = classroom
    assignment = make_assignment(course)
    course.delete()
    with pytest.raises(NotFound):
        lookup(ResourceType.ASSIGNMENT, assignment.pk)


def test_message_event_news_and_user_facts(classroom):
    teacher, s1, s2, course = classroom
    message = Message.objects.create(sender=s1, recipient=teacher, subject="Q", content="?")
    facts = lookup(ResourceType.MESSAGE, message.pk)
    assert facts.owner_id == s1.pk and facts.participant_ids == frozenset({teacher.pk})

    event = CalendarEvent.objects.create(
        title="Review", start=course.created_at, end=course.created_at, created_by=teacher, course=course
    )
    event.participants.add(s2)
    facts = lookup(ResourceType.EVENT, event.pk)
    assert facts.owner_id == teacher.pk and facts.participant_ids == frozenset({s2.pk})

    news = News.objects.create(title="Open day", content="...", author=teacher, is_published=False)
    assert lookup(ResourceType.NEWS, news.pk).is_published is False

    assert lookup(ResourceType.USER, s2.pk).owner_id == s2.pk


@pytest.mark.django_db
@pytest.mark.parametrize("kind", list(ResourceType))
def test_unknown_ids_raise_not_found(kind):
    with pytest.raises(NotFound):
        lookup(kind, 987654)


@pytest.mark.django_db
def test_malformed_ids_raise_not_found():
    with pytest.raises(NotFound):
        lookup(ResourceType.COURSE, "abc")
