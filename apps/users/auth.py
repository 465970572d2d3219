import logging

import jwt
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from graphql_jwt.settings import jwt_settings
from graphql_jwt.utils import jwt_decode
from django.contrib.auth import get_user_model
from django.utils.encoding import smart_str

User = get_user_model()
logger = logging.getLogger(__name__)


def user_from_token(token: str):
    """
    Resolve an access token to an active user, or None.
    Shared by the REST, GraphQL and websocket entry points.
    """
    if not token:
        return None
    try:
        payload = jwt_decode(token)
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected token: %s", exc)
        return None

    username = payload.get(User.USERNAME_FIELD)
    if not username:
        return None
    return User.objects.filter(**{User.USERNAME_FIELD: username}, is_active=True).first()


def token_from_header(header: str):
    """Return the token part of an `Authorization: Bearer <token>` header."""
    prefix = f"{jwt_settings.JWT_AUTH_HEADER_PREFIX} "
    header = smart_str(header or '')
    if not header.startswith(prefix):
        return None
    return header[len(prefix):].strip() or None


class BearerJWTAuthentication(BaseAuthentication):
    """
    DRF authentication class for django-graphql-jwt access tokens.
    Expects header: Authorization: Bearer <token>
    """
    def authenticate(self, request):
        auth = request.META.get('HTTP_AUTHORIZATION', '')
        if not auth:
            return None

        token = token_from_header(auth)
        if token is None:
            raise AuthenticationFailed('Missing or invalid token')

        user = user_from_token(token)
        if user is None:
            raise AuthenticationFailed('Missing or invalid token')
        return (user, token)

    def authenticate_header(self, request):
        return jwt_settings.JWT_AUTH_HEADER_PREFIX
