from __future__ import annotations

from datetime import timedelta

import pytest

from assignments.models import Grade, Submission
from access.tests.factories import client_for, enrol, make_assignment, make_course, make_user


@pytest.fixture
def setup(db):
    teacher = make_user("as_t", role="teacher")
    student = make_user("as_s")
    course = make_course(teacher)
    enrol(course, student)
    return teacher, student, course


def test_teacher_creates_assignment_for_own_course_only(setup):
    teacher, student, course = setup
    due = "2030-01-01T12:00:00Z"
    payload = {"course": course.pk, "title": "Lab 1", "due_date": due, "points": 20}
    assert client_for(student).post("/api/v1/assignments/", payload, format="json").status_code == 403
    r = client_for(teacher).post("/api/v1/assignments/", payload, format="json")
    assert r.status_code == 201
    assert r.json()["course"] == course.pk

    other = make_course(make_user("as_t2", role="teacher"))
    payload["course"] = other.pk
    assert client_for(teacher).post("/api/v1/assignments/", payload, format="json").status_code == 403


def test_assignment_course_cannot_be_changed(setup):
    teacher, _, course = setup
    assignment = make_assignment(course)
    other = make_course(teacher)
    r = client_for(teacher).patch(f"/api/v1/assignments/{assignment.pk}/", {"course": other.pk}, format="json")
    assert r.status_code == 400


def test_submit_then_resubmit_replaces_the_work(setup):
    _, student, course = setup
    assignment = make_assignment(course)
    c = client_for(student)
    first = {"attachments": [{"file_name": "a.pdf", "file_url": "/media/a.pdf"}], "comment": "v1"}
    r = c.post(f"/api/v1/assignments/{assignment.pk}/submit/", first, format="json")
    assert r.status_code == 201
    assert r.json()["attachments"] == first["attachments"]

    r = c.post(f"/api/v1/assignments/{assignment.pk}/submit/", {"comment": "v2"}, format="json")
    assert r.status_code == 200
    sub = Submission.objects.get(assignment=assignment, student=student)
    assert sub.comment == "v2"
    assert sub.attachments == []


def test_late_submission_is_forbidden_with_reason(setup):
    _, student, course = setup
    assignment = make_assignment(course, due_in=-timedelta(minutes=1))
    r = client_for(student).post(f"/api/v1/assignments/{assignment.pk}/submit/", {}, format="json")
    assert r.status_code == 403
    assert r.json()["message"] == "The due date for this assignment has passed."
    assert not Submission.objects.exists()


def test_non_member_and_admin_cannot_submit(setup):
    _, _, course = setup
    assignment = make_assignment(course)
    outsider = make_user("as_x")
    r = client_for(outsider).post(f"/api/v1/assignments/{assignment.pk}/submit/", {}, format="json")
    assert r.status_code == 403
    assert r.json()["message"] == "You are not enrolled in this course."
    admin = make_user("as_a", role="admin")
    assert client_for(admin).post(f"/api/v1/assignments/{assignment.pk}/submit/", {}, format="json").status_code == 403
    assert client_for(admin).post("/api/v1/assignments/999999/submit/", {}, format="json").status_code == 404


def test_grading_a_submission_mirrors_into_grades(setup):
    teacher, student, course = setup
    assignment = make_assignment(course, points=50)
    client_for(student).post(f"/api/v1/assignments/{assignment.pk}/submit/", {"comment": "done"}, format="json")
    sub = Submission.objects.get()

    url = f"/api/v1/assignments/{assignment.pk}/submissions/{sub.pk}/grade/"
    assert client_for(student).post(url, {"grade": 50}, format="json").status_code == 403
    assert client_for(teacher).post(url, {"grade": 51}, format="json").status_code == 400

    r = client_for(teacher).post(url, {"grade": 42, "feedback": "Good"}, format="json")
    assert r.status_code == 200
    assert r.json()["grade"] == 42
    grade = Grade.objects.get(assignment=assignment, student=student)
    assert (grade.grade, grade.max_grade, grade.feedback) == (42, 50, "Good")
    assert grade.graded_by_id == teacher.pk

    # Resubmitting replaces the work but keeps the mark on both records
    r = client_for(student).post(f"/api/v1/assignments/{assignment.pk}/submit/", {"comment": "again"}, format="json")
    assert r.status_code == 200
    sub.refresh_from_db()
    assert (sub.comment, sub.grade, sub.feedback) == ("again", 42, "Good")
    assert list(Grade.objects.filter(assignment=assignment).values_list("grade", flat=True)) == [42]


def test_submissions_listing_is_scoped_by_role(setup):
    teacher, student, course = setup
    other = make_user("as_s2")
    enrol(course, other)
    assignment = make_assignment(course)
    for who in (student, other):
        client_for(who).post(f"/api/v1/assignments/{assignment.pk}/submit/", {}, format="json")

    url = f"/api/v1/assignments/{assignment.pk}/submissions/"
    assert len(client_for(teacher).get(url).json()["results"]) == 2
    mine = client_for(student).get(url).json()["results"]
    assert [s["student"]["id"] for s in mine] == [student.pk]
