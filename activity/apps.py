from django.apps import AppConfig


class ActivityConfig(AppConfig):
    """Course notifications and their live alert feed."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "activity"
    verbose_name = "Notifications"

    def ready(self) -> None:  # pragma: no cover
        # Material announcements and alert broadcasting
        from . import signals  # noqa: F401
        return super().ready()
