"""DRF authentication backed by the Principal Resolver."""
from __future__ import annotations

from asgiref.sync import async_to_sync
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from .errors import Unauthenticated
from .principal import resolve_principal


class BearerTokenAuthentication(BaseAuthentication):
    """``Authorization: Bearer <token>`` -> `Principal` as ``request.user``.

    Requests without a bearer header are left anonymous; permission
    classes decide whether that is acceptable for the endpoint.
    """

    keyword = "Bearer"

    def authenticate(self, request):
        parts = get_authorization_header(request).split()
        if not parts or parts[0].lower() != self.keyword.lower().encode():
            return None
        if len(parts) != 2:
            raise Unauthenticated("Invalid Authorization header.")
        try:
            token = parts[1].decode()
        except UnicodeError:
            raise Unauthenticated("Invalid Authorization header.") from None
        principal = async_to_sync(resolve_principal)(token)
        return principal, token

    def authenticate_header(self, request):
        return self.keyword
