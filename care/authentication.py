"""
Bearer token authentication.

This module defines a subclass of simplejwt's ``JWTAuthentication``
that reports verification failures with the project's own error
codes, and the helper that issues the signed token handed out at
login and registration.  Keeping it apart from any view definitions
avoids circular imports when the REST framework loads authentication
classes during initialisation.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed as JWTAuthenticationFailed
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .exceptions import InvalidToken


def issue_token(user) -> str:
    """Return a signed access token carrying ``userId`` and ``userType``.

    Recent simplejwt releases store the user id claim as a string; it is
    written back as an integer so the token matches the login payload.
    """
    token = AccessToken.for_user(user)
    token['userId'] = user.id
    token['userType'] = user.role
    return str(token)


class BearerJWTAuthentication(JWTAuthentication):
    """``Authorization: Bearer <token>`` authentication.

    A request without the header is left anonymous, so the permission
    layer answers 401.  A header carrying a bad signature, an expired
    token or an unknown user is answered with 403 ``invalid_token``.
    """

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except (JWTAuthenticationFailed, TokenError) as exc:
            raise InvalidToken() from exc

    def authenticate_token(self, raw_token: str):
        """Validate a raw token outside of a DRF request (WebSocket handshake)."""
        try:
            validated = self.get_validated_token(raw_token.encode())
            return self.get_user(validated)
        except (JWTAuthenticationFailed, TokenError) as exc:
            raise InvalidToken() from exc
