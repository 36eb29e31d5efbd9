"""ASGI entrypoint for Campusnet (HTTP and WebSocket)."""
import os

from django.core.asgi import get_asgi_application

# Default to development settings for local runs; override in deployment.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

django_asgi_app = get_asgi_application()

# Imported after Django is set up: the routes load models.
from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402

from access.middleware import TokenAuthMiddleware  # noqa: E402
from activity.routing import websocket_urlpatterns  # noqa: E402

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        "websocket": TokenAuthMiddleware(URLRouter(websocket_urlpatterns)),
    }
)
