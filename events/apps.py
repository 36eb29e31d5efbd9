from django.apps import AppConfig


class EventsConfig(AppConfig):
    """App configuration for calendar events."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "events"
