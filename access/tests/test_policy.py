from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from access.policy import ADMIN_EXEMPT_RESOURCES, POLICY, Action, ResourceType, authorize
from access.principal import Principal
from access.relationships import NO_RELATIONSHIPS, Relationships
from accounts.models import Role

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

teacher = Principal(id=1, role=Role.TEACHER)
other_teacher = Principal(id=2, role=Role.TEACHER)
student = Principal(id=10, role=Role.STUDENT)
outsider = Principal(id=11, role=Role.STUDENT)
admin = Principal(id=99, role=Role.ADMIN)

course = Relationships(owner_id=1, participant_ids=frozenset({10}), course_id=5)


@pytest.mark.parametrize("principal", [teacher, student, admin])
def test_course_read_allowed_for_owner_participants_and_admin(principal):
    assert authorize(principal, Action.READ, ResourceType.COURSE, course)


@pytest.mark.parametrize("principal", [other_teacher, outsider])
def test_course_read_denied_to_unrelated_principals(principal):
    decision = authorize(principal, Action.READ, ResourceType.COURSE, course)
    assert not decision
    assert not decision.unauthenticated


def test_course_mutations_are_owner_only():
    for action in (Action.UPDATE, Action.DELETE, Action.ENROLL, Action.UNENROLL):
        assert authorize(teacher, action, ResourceType.COURSE, course)
        assert not authorize(student, action, ResourceType.COURSE, course)
        assert not authorize(other_teacher, action, ResourceType.COURSE, course)


def test_only_teachers_create_courses():
    assert authorize(teacher, Action.CREATE, ResourceType.COURSE, NO_RELATIONSHIPS)
    assert not authorize(student, Action.CREATE, ResourceType.COURSE, NO_RELATIONSHIPS)


def test_material_write_requires_teacher_role_and_ownership():
    # A student recorded as the instructor still cannot publish materials
    odd_course = Relationships(owner_id=10, participant_ids=frozenset(), course_id=6)
    decision = authorize(student, Action.CREATE, ResourceType.MATERIAL, odd_course)
    assert not decision
    assert decision.reason == "teacher"
    assert authorize(teacher, Action.CREATE, ResourceType.MATERIAL, course)
    assert not authorize(other_teacher, Action.UPDATE, ResourceType.MATERIAL, course)


def test_submission_requires_enrolment_and_open_deadline():
    open_assignment = Relationships(owner_id=1, participant_ids=frozenset({10}), due_date=NOW + timedelta(hours=1))
    assert authorize(student, Action.SUBMIT, ResourceType.ASSIGNMENT, open_assignment, at=NOW)

    late = authorize(student, Action.SUBMIT, ResourceType.ASSIGNMENT, open_assignment, at=NOW + timedelta(hours=2))
    assert not late
    assert late.reason == "before_due"

    not_enrolled = authorize(outsider, Action.SUBMIT, ResourceType.ASSIGNMENT, open_assignment, at=NOW)
    assert not not_enrolled
    assert not_enrolled.reason == "participant"


def test_submission_on_the_due_instant_is_accepted():
    facts = Relationships(owner_id=1, participant_ids=frozenset({10}), due_date=NOW)
    assert authorize(student, Action.SUBMIT, ResourceType.ASSIGNMENT, facts, at=NOW)


def test_admin_cannot_submit_work():
    facts = Relationships(owner_id=1, participant_ids=frozenset({10}), due_date=NOW + timedelta(days=1))
    assert not authorize(admin, Action.SUBMIT, ResourceType.ASSIGNMENT, facts, at=NOW)


def test_grade_read_for_subject_and_instructor_only():
    grade = Relationships(owner_id=1, participant_ids=frozenset({10, 11}), course_id=5, subject_id=10)
    assert authorize(student, Action.READ, ResourceType.GRADE, grade)
    assert authorize(teacher, Action.READ, ResourceType.GRADE, grade)
    # Enrolled in the same course, but not the graded student
    assert not authorize(outsider, Action.READ, ResourceType.GRADE, grade)


def test_notification_creation_is_owner_only_and_reading_follows_course():
    assert authorize(teacher, Action.CREATE, ResourceType.NOTIFICATION, course)
    assert not authorize(student, Action.CREATE, ResourceType.NOTIFICATION, course)
    assert authorize(student, Action.MARK_READ, ResourceType.NOTIFICATION, course)
    assert not authorize(outsider, Action.READ, ResourceType.NOTIFICATION, course)


def test_messages_are_private_even_for_admin():
    message = Relationships(owner_id=10, participant_ids=frozenset({1}))
    assert ResourceType.MESSAGE in ADMIN_EXEMPT_RESOURCES
    for action in (Action.READ, Action.DELETE, Action.MARK_READ):
        assert authorize(student, action, ResourceType.MESSAGE, message)
        assert authorize(teacher, action, ResourceType.MESSAGE, message)
        assert not authorize(admin, action, ResourceType.MESSAGE, message)
        assert not authorize(outsider, action, ResourceType.MESSAGE, message)


def test_published_news_is_public_and_unpublished_is_admin_only():
    published = Relationships(is_published=True)
    draft = Relationships(is_published=False)
    assert authorize(None, Action.READ, ResourceType.NEWS, published)
    assert authorize(admin, Action.READ, ResourceType.NEWS, draft)
    assert not authorize(student, Action.READ, ResourceType.NEWS, draft)
    anonymous = authorize(None, Action.READ, ResourceType.NEWS, draft)
    assert not anonymous and anonymous.unauthenticated


def test_news_writes_fall_through_to_default_deny():
    for action in (Action.CREATE, Action.UPDATE, Action.DELETE, Action.TOGGLE_VISIBILITY, Action.LIST):
        assert (ResourceType.NEWS, action) not in POLICY
        assert not authorize(teacher, action, ResourceType.NEWS, NO_RELATIONSHIPS)
        assert authorize(admin, action, ResourceType.NEWS, NO_RELATIONSHIPS)


def test_anonymous_principal_is_flagged_unauthenticated():
    decision = authorize(None, Action.READ, ResourceType.COURSE, course)
    assert not decision
    assert decision.unauthenticated


def test_event_access_follows_creator_and_participants():
    event = Relationships(owner_id=10, participant_ids=frozenset({1}))
    assert authorize(student, Action.UPDATE, ResourceType.EVENT, event)
    assert authorize(teacher, Action.READ, ResourceType.EVENT, event)
    assert not authorize(teacher, Action.DELETE, ResourceType.EVENT, event)
    assert not authorize(outsider, Action.READ, ResourceType.EVENT, event)


def test_users_read_themselves_and_nothing_else():
    me = Relationships(owner_id=10)
    assert authorize(student, Action.READ, ResourceType.USER, me)
    assert not authorize(student, Action.UPDATE, ResourceType.USER, me)
    assert not authorize(outsider, Action.READ, ResourceType.USER, me)
    assert not authorize(teacher, Action.LIST, ResourceType.USER, NO_RELATIONSHIPS)


def test_string_values_are_accepted_for_action_and_resource():
    assert authorize(teacher, "update", "course", course)
