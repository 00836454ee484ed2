"""
JWT WebSocket authentication for Django Channels.

Browsers cannot set an Authorization header on a WebSocket handshake, so
dashboards pass their access token as ``?token=<jwt>``. The middleware
resolves it to a user and puts it in ``scope["user"]``; anything invalid
becomes ``AnonymousUser`` and the consumer decides what that may see.
"""
from urllib.parse import parse_qs
import logging

import jwt
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser

logger = logging.getLogger(__name__)


class JWTQueryStringAuthMiddleware(BaseMiddleware):

    async def __call__(self, scope, receive, send):
        if scope["type"] == "websocket":
            scope["user"] = await self.get_user_from_token(scope)
        return await super().__call__(scope, receive, send)

    async def get_user_from_token(self, scope):
        query = parse_qs(scope.get("query_string", b"").decode())
        token = (query.get("token") or [None])[0]
        if not token:
            return AnonymousUser()

        jwt_config = getattr(settings, "SIMPLE_JWT", {})
        try:
            payload = jwt.decode(
                token,
                jwt_config.get("SIGNING_KEY", settings.SECRET_KEY),
                algorithms=[jwt_config.get("ALGORITHM", "HS256")],
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Expired JWT token in WebSocket connection")
            return AnonymousUser()
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid JWT token in WebSocket connection: {e}")
            return AnonymousUser()

        user_id = payload.get("user_id")
        if not user_id:
            logger.warning("JWT payload missing user_id")
            return AnonymousUser()

        return await self._load_user(user_id)

    @database_sync_to_async
    def _load_user(self, user_id):
        User = get_user_model()
        try:
            return User.objects.get(id=user_id, is_active=True)
        except User.DoesNotExist:
            logger.warning(f"User {user_id} from JWT not found")
            return AnonymousUser()
