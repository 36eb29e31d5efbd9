from django.apps import AppConfig


class NewsConfig(AppConfig):
    """App configuration for campus news."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "news"
