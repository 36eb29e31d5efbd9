"""DRF exception handler rendering the API error envelope.

Kept apart from `access.errors`: DRF loads the authentication classes
while ``rest_framework.views`` is still initialising, and those import
the error taxonomy. Only this module depends on ``rest_framework.views``.
"""
from __future__ import annotations

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions
from rest_framework.views import exception_handler

from .errors import Conflict, Forbidden, NotFound, ValidationError


def _first_message(data) -> str:
    if isinstance(data, dict):
        for value in data.values():
            return _first_message(value)
        return ""
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ""
    return str(data)


def api_exception_handler(exc, context):
    """Render DRF and access errors as ``{"success": false, "message"}``.

    Serializer validation failures additionally carry an ``errors`` field
    map, and conflicts carry the id of the conflicting resource when known.
    """
    if isinstance(exc, Http404):
        exc = NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = Forbidden()

    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    body = {"success": False}
    if isinstance(exc, exceptions.ValidationError):
        body["message"] = _first_message(data) or ValidationError.default_detail
        body["errors"] = data if isinstance(data, dict) else {"non_field_errors": data}
    elif isinstance(data, dict) and "detail" in data:
        body["message"] = str(data["detail"])
    else:
        body["message"] = _first_message(data)
    if isinstance(exc, Conflict) and exc.conflict_id is not None:
        body["conflict_id"] = exc.conflict_id
    response.data = body
    return response
