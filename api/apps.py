from django.apps import AppConfig


class ApiConfig(AppConfig):
    """REST API v1: serializers, viewsets and routing (no models)."""

    name = "api"
    verbose_name = "REST API"
