"""Channels middleware resolving ``?token=`` into ``scope["principal"]``."""
from __future__ import annotations

import logging
from urllib.parse import parse_qs

from channels.middleware import BaseMiddleware

from .errors import Unauthenticated
from .principal import resolve_principal

logger = logging.getLogger(__name__)


class TokenAuthMiddleware(BaseMiddleware):
    """Resolve the connection's bearer token once, at connect time.

    Browsers cannot set headers on WebSocket handshakes, so the token
    travels in the query string. An invalid or missing token leaves the
    principal as None; consumers reject such connections themselves.
    """

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        scope["principal"] = await self.resolve(scope)
        return await super().__call__(scope, receive, send)

    @staticmethod
    async def resolve(scope):
        query = parse_qs(scope.get("query_string", b"").decode())
        token = (query.get("token") or [None])[0]
        if not token:
            return None
        try:
            return await resolve_principal(token)
        except Unauthenticated as exc:
            logger.info("WebSocket token rejected: %s", exc.detail)
            return None
