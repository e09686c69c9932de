"""
WebSocket authentication.

Browsers cannot set an ``Authorization`` header on a WebSocket
handshake, so the access token travels in the query string:
``ws/messages/?token=<jwt>``.  A missing or invalid token leaves the
scope anonymous and the consumer refuses the connection.
"""
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser

from care.authentication import BearerJWTAuthentication
from care.exceptions import InvalidToken


@database_sync_to_async
def _user_for_token(raw_token: str):
    try:
        return BearerJWTAuthentication().authenticate_token(raw_token)
    except InvalidToken:
        return AnonymousUser()


class JWTAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get("query_string", b"").decode())
        token = (query.get("token") or [""])[0]
        scope = dict(scope)
        scope["user"] = await _user_for_token(token) if token else AnonymousUser()
        return await super().__call__(scope, receive, send)
