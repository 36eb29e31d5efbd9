from django.apps import AppConfig


class AccessConfig(AppConfig):
    """App configuration for the authorization core (no models)."""

    name = "access"
    verbose_name = "Access control"
