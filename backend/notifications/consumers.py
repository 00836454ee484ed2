import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer

from .services import STAFF_CHANNELS, group_name_for

logger = logging.getLogger(__name__)

STAFF_ROLES = {"ADMIN", "STAFF"}


class RelayConsumer(AsyncWebsocketConsumer):
    """
    Subscribes a socket to one relay channel.

    ``kitchen`` and ``admin`` require an authenticated staff user (see
    ``JWTQueryStringAuthMiddleware``); ``order-<id>`` channels are open so
    the customer's confirmation page can listen for its own payment.
    """

    async def connect(self):
        self.channel = self.scope["url_route"]["kwargs"]["channel"]

        if self.channel in STAFF_CHANNELS and not self._is_staff():
            logger.warning(f"Rejected unauthenticated subscription to {self.channel}")
            await self.close(code=4003)
            return

        if self.channel not in STAFF_CHANNELS and not self.channel.startswith("order-"):
            await self.close(code=4004)
            return

        self.group_name = group_name_for(self.channel)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        logger.info(f"Socket subscribed to {self.channel}")

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or "{}")
        except json.JSONDecodeError:
            logger.error(f"Invalid JSON received on {self.channel}")
            return

        if data.get("type") == "ping":
            await self.send(text_data=json.dumps({"type": "pong"}))

    async def relay_event(self, event):
        await self.send(
            text_data=json.dumps({"event": event["event"], "payload": event["payload"]})
        )

    def _is_staff(self):
        user = self.scope.get("user")
        return bool(
            user is not None
            and user.is_authenticated
            and getattr(user, "role", None) in STAFF_ROLES
        )
