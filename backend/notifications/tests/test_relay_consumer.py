"""
Relay WebSocket Tests

Staff channels need a staff JWT in the query string; order channels are
open to the customer's confirmation page.
"""
import json

import pytest
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from rest_framework_simplejwt.tokens import RefreshToken

from core_backend.asgi import application
from notifications.services import group_name_for
from users.models import User


@database_sync_to_async
def staff_token():
    user = User.objects.create_user(
        email="line@restaurant.test", password="password123", role=User.Role.STAFF
    )
    return str(RefreshToken.for_user(user).access_token)


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestRelayConsumer:

    async def test_order_channel_receives_events(self):
        communicator = WebsocketCommunicator(application, "/ws/relay/order-5/")
        connected, _ = await communicator.connect()
        assert connected

        await get_channel_layer().group_send(
            group_name_for("order-5"),
            {"type": "relay.event", "event": "order.paid", "payload": {"order_id": 5, "status": "PAID"}},
        )

        message = json.loads(await communicator.receive_from())
        assert message == {"event": "order.paid", "payload": {"order_id": 5, "status": "PAID"}}
        await communicator.disconnect()

    async def test_kitchen_requires_token(self):
        communicator = WebsocketCommunicator(application, "/ws/relay/kitchen/")
        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4003

    async def test_kitchen_with_staff_token(self):
        token = await staff_token()
        communicator = WebsocketCommunicator(application, f"/ws/relay/kitchen/?token={token}")
        connected, _ = await communicator.connect()

        assert connected
        await communicator.send_to(text_data=json.dumps({"type": "ping"}))
        assert json.loads(await communicator.receive_from()) == {"type": "pong"}
        await communicator.disconnect()

    async def test_invalid_token_is_anonymous(self):
        communicator = WebsocketCommunicator(application, "/ws/relay/admin/?token=garbage")
        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4003

    async def test_unknown_channel(self):
        communicator = WebsocketCommunicator(application, "/ws/relay/payments/")
        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4004
