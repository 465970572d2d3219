from strawberry.types import Info
from graphql_jwt.exceptions import PermissionDenied
from apps.users.auth import token_from_header, user_from_token


def get_user(info: Info):
    request = info.context.request
    token = token_from_header(request.headers.get("authorization", ""))
    return user_from_token(token) if token else None


def require_user(info: Info):
    user = get_user(info)
    if user is None:
        raise PermissionDenied("UNAUTHENTICATED")
    return user
