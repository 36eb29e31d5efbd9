from __future__ import annotations

from django.urls import re_path

from .consumers import CourseAlertsConsumer


websocket_urlpatterns = [
    re_path(r"^ws/courses/(?P<course_id>\d+)/alerts/$", CourseAlertsConsumer.as_asgi()),
]
