from django.apps import AppConfig


class MaterialsConfig(AppConfig):
    """Files instructors attach to their courses."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "materials"
    verbose_name = "Course materials"
