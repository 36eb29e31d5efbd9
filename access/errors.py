"""Error taxonomy shared by the resolver, the lookups and the API.

Every error is a DRF `APIException` so views can simply raise it;
`access.handlers.api_exception_handler` renders them all with the same
envelope:

    {"success": false, "message": "..."}
"""
from __future__ import annotations

from rest_framework import exceptions, status


class AccessError(exceptions.APIException):
    """Base class for errors raised by the access layer."""


class Unauthenticated(AccessError, exceptions.AuthenticationFailed):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required."
    default_code = "unauthenticated"


class Forbidden(AccessError, exceptions.PermissionDenied):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."
    default_code = "forbidden"


class NotFound(AccessError, exceptions.NotFound):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."
    default_code = "not_found"


class Conflict(AccessError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The request conflicts with the current state."
    default_code = "conflict"

    def __init__(self, detail=None, conflict_id=None):
        super().__init__(detail)
        self.conflict_id = conflict_id


class ValidationError(AccessError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"

