from __future__ import annotations

from django.db import transaction
from django.utils import timezone

from access.errors import ValidationError
from courses.models import Enrolment

from .models import Assignment, Grade, Submission


def submit_work(assignment: Assignment, student_id, *, attachments=None, comment: str = "", at=None) -> tuple[Submission, bool]:
    """Create the student's submission, or replace the previous one.

    A replaced submission keeps its grade and feedback, as does the
    matching `Grade`. A first submission picks up a grade recorded before
    it existed. Returns ``(submission, created)``.
    """
    with transaction.atomic():
        submission, created = Submission.objects.update_or_create(
            assignment=assignment,
            student_id=student_id,
            defaults={
                "submitted_at": at or timezone.now(),
                "attachments": list(attachments or []),
                "comment": comment,
            },
        )
        if created:
            grade = Grade.objects.filter(assignment=assignment, student_id=student_id).first()
            if grade is not None:
                sync_submission_from_grade(grade)
                submission.refresh_from_db(fields=["grade", "feedback"])
    return submission, created


def ensure_gradeable(course_id, student_id, assignment: Assignment | None = None) -> None:
    """Grades may only be given to enrolled students, for the course's own work."""
    if assignment is not None and assignment.course_id != course_id:
        raise ValidationError("Assignment does not belong to this course.")
    if not Enrolment.objects.filter(course_id=course_id, student_id=student_id).exists():
        raise ValidationError("Student is not enrolled in this course.")


def ensure_within_points(assignment: Assignment | None, grade) -> None:
    if assignment is not None and grade is not None and grade > assignment.points:
        raise ValidationError(f"Grade cannot exceed {assignment.points} points.")


def sync_submission_from_grade(grade: Grade) -> None:
    """Mirror an assignment grade onto the student's submission, if any."""
    if grade.assignment_id is None:
        return
    Submission.objects.filter(assignment_id=grade.assignment_id, student_id=grade.student_id).update(
        grade=grade.grade, feedback=grade.feedback
    )


def clear_submission_grade(grade: Grade) -> None:
    """Undo `sync_submission_from_grade` when the grade goes away."""
    if grade.assignment_id is None:
        return
    Submission.objects.filter(assignment_id=grade.assignment_id, student_id=grade.student_id).update(
        grade=None, feedback=""
    )


@transaction.atomic
def grade_submission(submission: Submission, *, grade: float, feedback: str = "", graded_by_id=None) -> Grade:
    """Mark a submission and keep the student's `Grade` record in step."""
    assignment = submission.assignment
    submission.grade = grade
    submission.feedback = feedback
    submission.save(update_fields=["grade", "feedback"])

    record, _ = Grade.objects.update_or_create(
        assignment=assignment,
        student_id=submission.student_id,
        defaults={
            "course_id": assignment.course_id,
            "grade": grade,
            "max_grade": float(assignment.points),
            "feedback": feedback,
            "graded_by_id": graded_by_id,
            "graded_at": timezone.now(),
        },
    )
    return record
