"""
Notification relay: best-effort fan-out of order events to dashboards.

Events are published to a channels group named after the logical channel
(``kitchen``, ``admin``, ``order-<id>``). Connected ``RelayConsumer``
sockets forward them to the browser as ``{"event", "payload"}``.

Publishing never raises. A failed publish is logged and reported as
``False`` so callers can note it, but an order flow must not fail or roll
back because a dashboard missed an update.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

KITCHEN_CHANNEL = "kitchen"
ADMIN_CHANNEL = "admin"
STAFF_CHANNELS = {KITCHEN_CHANNEL, ADMIN_CHANNEL}


def order_channel(order_id):
    return f"order-{order_id}"


def group_name_for(channel: str) -> str:
    """Channel layer group names only allow ASCII alphanumerics, '-', '_' and '.'."""
    safe = "".join(c if c.isascii() and (c.isalnum() or c in "-_.") else "_" for c in channel)
    return f"relay.{safe}"[:99]


class NotificationRelay:

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    def publish(self, channel: str, event: str, payload: dict) -> bool:
        layer = self.channel_layer
        if layer is None:
            logger.warning(f"No channel layer configured; dropped {event} on {channel}")
            return False

        try:
            async_to_sync(layer.group_send)(
                group_name_for(channel),
                {"type": "relay.event", "event": event, "payload": payload},
            )
        except Exception as e:
            logger.error(f"Failed to publish {event} on {channel}: {e}")
            return False

        logger.debug(f"Published {event} on {channel}")
        return True
