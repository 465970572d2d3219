# apps/chat/middleware.py
from channels.db import database_sync_to_async
from urllib.parse import parse_qs


@database_sync_to_async
def get_user_from_token(token_key):
    # Imported lazily: this module is loaded before the app registry is ready.
    from apps.users.auth import user_from_token
    return user_from_token(token_key)


class JwtAuthMiddleware:
    """Populate scope['user'] from a `?token=<jwt>` query parameter."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        query_string = scope.get("query_string", b"").decode("utf-8")
        query_params = parse_qs(query_string)
        token = query_params.get("token", [None])[0]

        from django.contrib.auth.models import AnonymousUser
        scope['user'] = AnonymousUser()

        if token:
            user = await get_user_from_token(token)
            if user:
                scope['user'] = user

        return await self.app(scope, receive, send)
