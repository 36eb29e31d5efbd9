"""Course membership changes.

Both operations are single statements guarded by the database: enrolling
relies on the unique ``(course, student)`` constraint, removal on the
row count of one conditional DELETE. Concurrent callers therefore can
never produce a duplicate membership or a phantom removal.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from access.errors import Conflict

from .models import Course, Enrolment

logger = logging.getLogger(__name__)


def enrol_student(course: Course, student) -> Enrolment:
    try:
        with transaction.atomic():
            enrolment = Enrolment.objects.create(course=course, student=student)
    except IntegrityError:
        raise Conflict("Student is already enrolled in this course.") from None
    logger.info("Enrolled student %s in course %s", student.pk, course.pk)
    return enrolment


def remove_student(course: Course, student_id) -> None:
    deleted, _ = Enrolment.objects.filter(course=course, student_id=student_id).delete()
    if not deleted:
        raise Conflict("Student is not enrolled in this course.")
    logger.info("Removed student %s from course %s", student_id, course.pk)
