from django.apps import AppConfig


class MessagingConfig(AppConfig):
    """App configuration for private user-to-user messages."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "messaging"
