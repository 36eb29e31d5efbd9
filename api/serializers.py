"""Serializers for REST API v1.

Relations that take part in authorization (a resource's course, a
grade's student, a message's recipient) are exposed as plain ids. The
views resolve and authorize them through the access guard before
saving, so a missing parent is reported as 404 rather than as a field
error.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from accounts.models import Role, UserSession
from activity.models import Notification
from assignments.models import Assignment, Grade, Submission
from courses.models import Course, Enrolment
from events.models import CalendarEvent, EventType
from materials.models import Material
from messaging.models import Message
from news.models import News

User = get_user_model()

SELF_SERVICE_ROLES = (Role.STUDENT, Role.TEACHER)


def _immutable(serializer, field: str, value):
    # Re-parenting would move a resource out of the scope it was authorized in.
    instance = serializer.instance
    if instance is not None and getattr(instance, field) != value:
        raise serializers.ValidationError("This field cannot be changed.")
    return value


class UserSerializer(serializers.ModelSerializer):
    role = serializers.CharField(source="profile.role", read_only=True)
    full_name = serializers.CharField(source="profile.full_name", read_only=True)

    class Meta:
        model = User
        fields = ("id", "username", "email", "role", "full_name")


class ProfileSerializer(serializers.ModelSerializer):
    """The caller's own account. Role and student number are read-only here."""

    role = serializers.CharField(source="profile.role", read_only=True)
    full_name = serializers.CharField(source="profile.full_name", required=False, allow_blank=True, max_length=200)
    phone = serializers.CharField(source="profile.phone", required=False, allow_blank=True, max_length=50)
    address = serializers.CharField(source="profile.address", required=False, allow_blank=True, max_length=255)
    program = serializers.CharField(source="profile.program", required=False, allow_blank=True, max_length=200)
    year_of_admission = serializers.IntegerField(source="profile.year_of_admission", required=False, allow_null=True, min_value=1900)
    avatar_url = serializers.URLField(source="profile.avatar_url", required=False, allow_blank=True)
    student_number = serializers.CharField(source="profile.student_number", read_only=True)

    class Meta:
        model = User
        fields = (
            "id", "username", "email", "role", "full_name", "phone", "address",
            "program", "year_of_admission", "avatar_url", "student_number", "date_joined",
        )
        read_only_fields = ("id", "username", "date_joined")

    def validate_email(self, value):
        qs = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if value and qs.exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def update(self, instance, validated_data):
        profile_data = validated_data.pop("profile", {})
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        profile = instance.profile
        for attr, value in profile_data.items():
            setattr(profile, attr, value)
        profile.save()
        return instance


class AdminUserSerializer(ProfileSerializer):
    """Administrator view of an account: role and activation are editable."""

    role = serializers.ChoiceField(source="profile.role", choices=Role.choices, required=False)

    class Meta(ProfileSerializer.Meta):
        fields = ProfileSerializer.Meta.fields + ("is_active", "last_login")
        read_only_fields = ("id", "date_joined", "last_login")


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    full_name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    role = serializers.ChoiceField(choices=[(r.value, r.label) for r in SELF_SERVICE_ROLES], default=Role.STUDENT)

    def validate_username(self, value):
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("This username is taken.")
        return value

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate(self, attrs):
        candidate = User(username=attrs["username"], email=attrs["email"])
        try:
            validate_password(attrs["password"], user=candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({"password": list(exc.messages)})
        return attrs

    def create(self, validated_data):
        user = User.objects.create_user(
            username=validated_data["username"],
            email=validated_data["email"],
            password=validated_data["password"],
        )
        profile = user.profile
        profile.role = validated_data["role"]
        profile.full_name = validated_data.get("full_name", "")
        profile.save()
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    username = serializers.CharField(required=False)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        if not attrs.get("email") and not attrs.get("username"):
            raise serializers.ValidationError("Provide an email or a username.")
        return attrs


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        user = self.context["user"]
        if not user.check_password(attrs["current_password"]):
            raise serializers.ValidationError({"current_password": ["Current password is incorrect."]})
        try:
            validate_password(attrs["new_password"], user=user)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({"new_password": list(exc.messages)})
        return attrs


class SessionSerializer(serializers.ModelSerializer):
    current = serializers.SerializerMethodField()

    class Meta:
        model = UserSession
        fields = ("id", "device_type", "device_name", "ip_address", "created_at", "last_active", "expires_at", "current")

    def get_current(self, obj) -> bool:
        return str(obj.pk) == str(self.context.get("session_id"))


class CourseSerializer(serializers.ModelSerializer):
    instructor = UserSerializer(read_only=True)
    student_count = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = (
            "id", "code", "title", "description", "schedule", "start_date", "end_date",
            "instructor", "student_count", "created_at", "updated_at",
        )
        read_only_fields = ("created_at", "updated_at")

    def get_student_count(self, obj) -> int:
        count = getattr(obj, "student_count", None)
        return count if count is not None else obj.enrolments.count()

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": ["End date must not be before the start date."]})
        return attrs


class EnrolledStudentSerializer(serializers.ModelSerializer):
    student = UserSerializer(read_only=True)
    enrolled_at = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Enrolment
        fields = ("student", "enrolled_at")


class MembershipSerializer(serializers.Serializer):
    student = serializers.IntegerField(min_value=1)


class MaterialSerializer(serializers.ModelSerializer):
    file_url = serializers.SerializerMethodField()

    class Meta:
        model = Material
        fields = (
            "id", "course", "title", "description", "file", "file_url",
            "size_bytes", "mime", "uploaded_by", "created_at", "updated_at",
        )
        read_only_fields = ("course", "size_bytes", "mime", "uploaded_by", "created_at", "updated_at")
        extra_kwargs = {"file": {"write_only": True}}

    def get_file_url(self, obj) -> str:
        if not obj.file:
            return ""
        request = self.context.get("request")
        return request.build_absolute_uri(obj.file.url) if request else obj.file.url


class AssignmentSerializer(serializers.ModelSerializer):
    course = serializers.IntegerField(source="course_id", min_value=1)

    class Meta:
        model = Assignment
        fields = ("id", "course", "title", "description", "due_date", "points", "created_at", "updated_at")
        read_only_fields = ("created_at", "updated_at")

    def validate_course(self, value):
        return _immutable(self, "course_id", value)


class AttachmentSerializer(serializers.Serializer):
    file_name = serializers.CharField(max_length=255)
    file_url = serializers.CharField(max_length=500)


class SubmitSerializer(serializers.Serializer):
    attachments = AttachmentSerializer(many=True, required=False)
    comment = serializers.CharField(required=False, allow_blank=True)


class SubmissionSerializer(serializers.ModelSerializer):
    student = UserSerializer(read_only=True)

    class Meta:
        model = Submission
        fields = ("id", "assignment", "student", "submitted_at", "attachments", "comment", "grade", "feedback")
        read_only_fields = fields


class GradeSubmissionSerializer(serializers.Serializer):
    grade = serializers.FloatField(min_value=0)
    feedback = serializers.CharField(required=False, allow_blank=True, default="")


class GradeSerializer(serializers.ModelSerializer):
    student = serializers.IntegerField(source="student_id", min_value=1)
    course = serializers.IntegerField(source="course_id", min_value=1)
    assignment = serializers.IntegerField(source="assignment_id", min_value=1, required=False, allow_null=True)

    class Meta:
        model = Grade
        fields = ("id", "student", "course", "assignment", "grade", "max_grade", "feedback", "graded_by", "graded_at")
        read_only_fields = ("graded_by", "graded_at")
        extra_kwargs = {"grade": {"min_value": 0}, "max_grade": {"min_value": 0}}

    def validate_student(self, value):
        return _immutable(self, "student_id", value)

    def validate_course(self, value):
        return _immutable(self, "course_id", value)

    def validate_assignment(self, value):
        return _immutable(self, "assignment_id", value)

    def validate(self, attrs):
        if attrs.get("assignment_id", getattr(self.instance, "assignment_id", None)) is not None:
            # Assignment grades are bounded by the assignment's points instead
            return attrs
        grade = attrs.get("grade", getattr(self.instance, "grade", None))
        max_grade = attrs.get("max_grade", getattr(self.instance, "max_grade", 100.0))
        if grade is not None and grade > max_grade:
            raise serializers.ValidationError({"grade": ["Grade cannot exceed the maximum grade."]})
        return attrs


class NotificationSerializer(serializers.ModelSerializer):
    course = serializers.IntegerField(source="course_id", min_value=1)
    is_read = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = ("id", "course", "sender", "title", "message", "is_alert", "created_at", "is_read")
        read_only_fields = ("sender", "created_at")

    def get_is_read(self, obj) -> bool:
        return bool(getattr(obj, "is_read", False))


class MessageSerializer(serializers.ModelSerializer):
    recipient = serializers.IntegerField(source="recipient_id", min_value=1)
    sender_username = serializers.CharField(source="sender.username", read_only=True)
    recipient_username = serializers.CharField(source="recipient.username", read_only=True)

    class Meta:
        model = Message
        fields = ("id", "sender", "sender_username", "recipient", "recipient_username", "subject", "content", "read", "created_at")
        read_only_fields = ("sender", "read", "created_at")


class NewsSerializer(serializers.ModelSerializer):
    # Declared so the partial unique constraint yields no field validator;
    # `news.utils.set_visibility` reports the conflicting item instead.
    is_visible = serializers.BooleanField(required=False)

    class Meta:
        model = News
        fields = ("id", "title", "content", "image", "author", "is_published", "is_visible", "created_at", "updated_at")
        read_only_fields = ("author", "created_at", "updated_at")


class VisibilitySerializer(serializers.Serializer):
    is_visible = serializers.BooleanField()


class CalendarEventSerializer(serializers.ModelSerializer):
    course = serializers.IntegerField(source="course_id", min_value=1, required=False, allow_null=True)
    type = serializers.ChoiceField(choices=EventType.choices, default=EventType.OTHER)
    participants = serializers.PrimaryKeyRelatedField(many=True, queryset=User.objects.all(), required=False)
    color = serializers.RegexField(r"^#[0-9a-fA-F]{6}$", required=False)

    class Meta:
        model = CalendarEvent
        fields = (
            "id", "title", "description", "start", "end", "all_day", "type",
            "course", "created_by", "participants", "color", "created_at",
        )
        read_only_fields = ("created_by", "created_at")

    def validate(self, attrs):
        start = attrs.get("start", getattr(self.instance, "start", None))
        end = attrs.get("end", getattr(self.instance, "end", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end": ["End must not be before start."]})
        return attrs
