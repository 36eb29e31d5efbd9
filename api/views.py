"""REST API v1 viewsets: courses, materials, assignments and grades.

Every object access goes through `access.guards.require` (via
`PolicyObjectMixin.get_object` or explicitly for parent-scoped
creation), so the decision rules live in one place: `access.policy`.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from access.errors import Conflict, NotFound, ValidationError
from access.guards import check, principal_of, require
from access.policy import Action, ResourceType, authorize
from access.relationships import NO_RELATIONSHIPS
from accounts.models import Role
from assignments.models import Assignment, Grade, Submission
from assignments.utils import (
    clear_submission_grade,
    ensure_gradeable,
    ensure_within_points,
    grade_submission,
    submit_work,
    sync_submission_from_grade,
)
from courses.models import Course, Enrolment
from courses.utils import enrol_student, remove_student
from materials.models import Material
from .filters import GradeFilter
from .permissions import PolicyObjectMixin
from .serializers import (
    AssignmentSerializer,
    CourseSerializer,
    EnrolledStudentSerializer,
    GradeSerializer,
    GradeSubmissionSerializer,
    MaterialSerializer,
    MembershipSerializer,
    SubmissionSerializer,
    SubmitSerializer,
)

User = get_user_model()


def readable_course_ids(principal):
    """Subquery of the courses a principal teaches or is enrolled in."""
    enrolled = Enrolment.objects.filter(student_id=principal.id).values("course_id")
    return Course.objects.filter(Q(instructor_id=principal.id) | Q(pk__in=enrolled)).values("pk")


class CourseViewSet(PolicyObjectMixin, viewsets.ModelViewSet):
    # GROUP BY drops Meta.ordering, so order explicitly for stable pages
    queryset = (
        Course.objects.select_related("instructor__profile")
        .annotate(student_count=Count("enrolments"))
        .order_by("title", "id")
    )
    serializer_class = CourseSerializer
    policy_resource = ResourceType.COURSE
    object_actions = {
        **PolicyObjectMixin.object_actions,
        "enroll": Action.ENROLL,
        "unenroll": Action.UNENROLL,
        "students": Action.READ,
    }
    search_fields = ["title", "code", "description", "instructor__username"]
    ordering_fields = ["title", "code", "start_date", "created_at"]

    def scoped_queryset(self, queryset):
        principal = self.request.user
        if principal.is_admin:
            return queryset
        return queryset.filter(pk__in=readable_course_ids(principal))

    def perform_create(self, serializer):
        principal = self.request.user
        check(principal, Action.CREATE, ResourceType.COURSE, NO_RELATIONSHIPS, message="Only teachers can create courses.")
        serializer.save(instructor_id=principal.id)

    def _student(self):
        data = MembershipSerializer(data=self.request.data)
        data.is_valid(raise_exception=True)
        return data.validated_data["student"]

    @action(detail=True, methods=["post"])
    def enroll(self, request, pk=None):
        course = self.get_object()
        student = User.objects.select_related("profile").filter(pk=self._student()).first()
        if student is None:
            raise NotFound("Student not found.")
        if getattr(getattr(student, "profile", None), "role", None) != Role.STUDENT:
            raise ValidationError("Only student accounts can be enrolled.")
        enrolment = enrol_student(course, student)
        return Response(EnrolledStudentSerializer(enrolment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def unenroll(self, request, pk=None):
        course = self.get_object()
        remove_student(course, self._student())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def students(self, request, pk=None):
        course = self.get_object()
        qs = course.enrolments.select_related("student__profile").order_by("student__username")
        page = self.paginate_queryset(qs)
        serializer = EnrolledStudentSerializer(page if page is not None else qs, many=True)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)


class MaterialViewSet(PolicyObjectMixin, viewsets.ModelViewSet):
    """Materials of one course (``/courses/<course_id>/materials/``)."""

    queryset = Material.objects.select_related("uploaded_by")
    serializer_class = MaterialSerializer
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    policy_resource = ResourceType.MATERIAL
    search_fields = ["title", "description"]
    ordering_fields = ["created_at", "title"]

    def get_queryset(self):
        return super().get_queryset().filter(course_id=self.kwargs["course_id"])

    def list(self, request, *args, **kwargs):
        require(request, Action.READ, ResourceType.MATERIAL, course_id=self.kwargs["course_id"])
        return super().list(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):
        require(request, Action.CREATE, ResourceType.MATERIAL, course_id=self.kwargs["course_id"])
        return super().create(request, *args, **kwargs)

    def perform_create(self, serializer):
        serializer.save(course_id=self.kwargs["course_id"], uploaded_by_id=self.request.user.id)


class AssignmentViewSet(PolicyObjectMixin, viewsets.ModelViewSet):
    queryset = Assignment.objects.select_related("course")
    serializer_class = AssignmentSerializer
    policy_resource = ResourceType.ASSIGNMENT
    object_actions = {
        **PolicyObjectMixin.object_actions,
        "submit": Action.SUBMIT,
        "submissions": Action.READ,
        "grade": Action.GRADE,
    }
    filterset_fields = ["course"]
    search_fields = ["title", "description"]
    ordering_fields = ["due_date", "title", "created_at"]

    def scoped_queryset(self, queryset):
        principal = self.request.user
        if principal.is_admin:
            return queryset
        return queryset.filter(course_id__in=readable_course_ids(principal))

    def perform_create(self, serializer):
        require(self.request, Action.CREATE, ResourceType.ASSIGNMENT, course_id=serializer.validated_data["course_id"])
        serializer.save()

    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        now = timezone.now()
        require(request, Action.SUBMIT, ResourceType.ASSIGNMENT, pk, at=now)
        assignment = get_object_or_404(Assignment, pk=pk)
        data = SubmitSerializer(data=request.data)
        data.is_valid(raise_exception=True)
        submission, created = submit_work(
            assignment,
            request.user.id,
            attachments=data.validated_data.get("attachments"),
            comment=data.validated_data.get("comment", ""),
            at=now,
        )
        return Response(
            SubmissionSerializer(submission).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["get"])
    def submissions(self, request, pk=None):
        """All submissions for graders; only the caller's own for students."""
        assignment = self.get_object()
        qs = assignment.submissions.select_related("student__profile")
        principal = principal_of(request.user)
        if not authorize(principal, Action.GRADE, ResourceType.ASSIGNMENT, self.relationships):
            qs = qs.filter(student_id=principal.id)
        page = self.paginate_queryset(qs)
        serializer = SubmissionSerializer(page if page is not None else qs, many=True)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)

    @action(detail=True, methods=["post"], url_path=r"submissions/(?P<submission_id>\d+)/grade")
    def grade(self, request, pk=None, submission_id=None):
        assignment = self.get_object()
        submission = Submission.objects.filter(pk=submission_id, assignment=assignment).select_related("assignment").first()
        if submission is None:
            raise NotFound("Submission not found.")
        data = GradeSubmissionSerializer(data=request.data)
        data.is_valid(raise_exception=True)
        ensure_within_points(assignment, data.validated_data["grade"])
        grade_submission(
            submission,
            grade=data.validated_data["grade"],
            feedback=data.validated_data["feedback"],
            graded_by_id=request.user.id,
        )
        submission.refresh_from_db()
        return Response(SubmissionSerializer(submission).data)


class GradeViewSet(PolicyObjectMixin, viewsets.ModelViewSet):
    queryset = Grade.objects.select_related("course", "assignment")
    serializer_class = GradeSerializer
    policy_resource = ResourceType.GRADE
    filterset_class = GradeFilter
    ordering_fields = ["graded_at", "grade"]

    def scoped_queryset(self, queryset):
        principal = self.request.user
        if principal.is_admin:
            return queryset
        return queryset.filter(Q(student_id=principal.id) | Q(course__instructor_id=principal.id))

    def perform_create(self, serializer):
        data = serializer.validated_data
        require(self.request, Action.CREATE, ResourceType.GRADE, course_id=data["course_id"])
        assignment = None
        if data.get("assignment_id") is not None:
            assignment = Assignment.objects.filter(pk=data["assignment_id"]).first()
            if assignment is None:
                raise NotFound("Assignment not found.")
        ensure_gradeable(data["course_id"], data["student_id"], assignment)
        ensure_within_points(assignment, data["grade"])
        extra = {"max_grade": float(assignment.points)} if assignment is not None else {}
        try:
            with transaction.atomic():
                grade = serializer.save(graded_by_id=self.request.user.id, **extra)
        except IntegrityError:
            existing = Grade.objects.filter(assignment=assignment, student_id=data["student_id"]).values_list("pk", flat=True).first()
            raise Conflict("This assignment is already graded for the student.", conflict_id=existing) from None
        sync_submission_from_grade(grade)

    @transaction.atomic
    def perform_update(self, serializer):
        # Assignment grades are always out of the assignment's points
        assignment = serializer.instance.assignment
        extra = {}
        if assignment is not None:
            ensure_within_points(assignment, serializer.validated_data.get("grade", serializer.instance.grade))
            extra["max_grade"] = float(assignment.points)
        grade = serializer.save(graded_by_id=self.request.user.id, graded_at=timezone.now(), **extra)
        sync_submission_from_grade(grade)

    @transaction.atomic
    def perform_destroy(self, instance):
        clear_submission_grade(instance)
        instance.delete()
