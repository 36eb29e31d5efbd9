from django.apps import AppConfig


class CoursesConfig(AppConfig):
    """Courses, their instructors and the enrolment roster."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "courses"
    verbose_name = "Courses"
