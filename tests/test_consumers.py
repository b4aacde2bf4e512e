import pytest
from asgiref.sync import sync_to_async
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from rest_framework_simplejwt.tokens import AccessToken

from notifications.consumers import CLOSE_UNAUTHENTICATED, OrderEventsConsumer
from notifications.groups import ADMIN_GROUP, owner_group
from notifications.middleware import JWTAuthMiddleware
from notifications.registry import registry
from notifications.sinks import ChannelLayerSink
from tests.factories import AdminUserFactory, UserFactory

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]

ORDER = {"orderId": "ORD-123456", "adminStatus": "Accepted"}


@pytest.fixture
def customer(transactional_db):
    return UserFactory(username="eater", email="eater@example.com")


@pytest.fixture
def staff(transactional_db):
    return AdminUserFactory(username="board", email="board@example.com")


async def _connect(user):
    communicator = WebsocketCommunicator(OrderEventsConsumer.as_asgi(), "/ws/orders/")
    communicator.scope["user"] = user
    connected, _ = await communicator.connect()
    assert connected
    return communicator


async def _event(group, event="order_updated", order=ORDER):
    await get_channel_layer().group_send(group, {"type": "order.event", "event": event, "order": order})


async def test_anonymous_connection_is_closed():
    communicator = WebsocketCommunicator(OrderEventsConsumer.as_asgi(), "/ws/orders/")

    connected, code = await communicator.connect()

    assert not connected
    assert code == CLOSE_UNAUTHENTICATED


async def test_customer_receives_events_for_joined_room(customer):
    communicator = await _connect(customer)

    await communicator.send_json_to({"action": "join", "email": "Eater@Example.com"})
    assert await communicator.receive_json_from() == {"event": "joined", "email": "eater@example.com"}
    assert registry.members("eater@example.com")

    await _event(owner_group("eater@example.com"))
    assert await communicator.receive_json_from() == {"event": "order_updated", "order": ORDER}

    await communicator.disconnect()


async def test_customer_cannot_join_someone_elses_room(customer):
    communicator = await _connect(customer)

    await communicator.send_json_to({"action": "join", "email": "other@example.com"})
    reply = await communicator.receive_json_from()

    assert reply["event"] == "error"
    assert not registry.members("other@example.com")
    await _event(owner_group("other@example.com"))
    assert await communicator.receive_nothing()

    await communicator.disconnect()


async def test_unknown_action_and_missing_email_are_errors(customer):
    communicator = await _connect(customer)

    await communicator.send_json_to({"action": "subscribe", "email": "eater@example.com"})
    assert (await communicator.receive_json_from())["event"] == "error"
    await communicator.send_json_to({"action": "join"})
    assert (await communicator.receive_json_from())["event"] == "error"

    await communicator.disconnect()


async def test_customer_does_not_get_admin_events(customer):
    communicator = await _connect(customer)

    await _event(ADMIN_GROUP, "order_created")

    assert await communicator.receive_nothing()
    await communicator.disconnect()


async def test_staff_join_admin_group_and_any_room(staff):
    communicator = await _connect(staff)

    await _event(ADMIN_GROUP, "order_created")
    assert (await communicator.receive_json_from())["event"] == "order_created"

    await communicator.send_json_to({"action": "join", "email": "someone@example.com"})
    assert (await communicator.receive_json_from())["event"] == "joined"

    await communicator.disconnect()


async def test_leave_stops_delivery(customer):
    communicator = await _connect(customer)
    await communicator.send_json_to({"action": "join", "email": "eater@example.com"})
    await communicator.receive_json_from()

    await communicator.send_json_to({"action": "leave", "email": "eater@example.com"})
    assert await communicator.receive_json_from() == {"event": "left", "email": "eater@example.com"}

    await _event(owner_group("eater@example.com"))
    assert await communicator.receive_nothing()
    assert not registry.members("eater@example.com")
    await communicator.disconnect()


async def test_disconnect_leaves_every_room(customer):
    communicator = await _connect(customer)
    await communicator.send_json_to({"action": "join", "email": "eater@example.com"})
    await communicator.receive_json_from()

    await communicator.disconnect()

    assert len(registry) == 0


async def test_channel_layer_sink_reaches_joined_socket(customer):
    communicator = await _connect(customer)
    await communicator.send_json_to({"action": "join", "email": "eater@example.com"})
    await communicator.receive_json_from()

    await sync_to_async(ChannelLayerSink().emit)(owner_group("eater@example.com"), "order_rejected", ORDER)

    assert await communicator.receive_json_from() == {"event": "order_rejected", "order": ORDER}
    await communicator.disconnect()


async def test_jwt_query_token_authenticates(customer):
    token = str(AccessToken.for_user(customer))
    app = JWTAuthMiddleware(OrderEventsConsumer.as_asgi())
    communicator = WebsocketCommunicator(app, f"/ws/orders/?token={token}")

    connected, _ = await communicator.connect()

    assert connected
    await communicator.disconnect()


async def test_jwt_invalid_token_is_rejected():
    app = JWTAuthMiddleware(OrderEventsConsumer.as_asgi())
    communicator = WebsocketCommunicator(app, "/ws/orders/?token=not-a-jwt")

    connected, code = await communicator.connect()

    assert not connected
    assert code == CLOSE_UNAUTHENTICATED


async def test_non_string_email_is_an_error_not_a_crash(customer):
    communicator = await _connect(customer)

    await communicator.send_json_to({"action": "join", "email": 5})
    assert await communicator.receive_json_from() == {"event": "error", "message": "email must be a string"}

    await communicator.send_json_to({"action": "join", "email": "eater@example.com"})
    assert (await communicator.receive_json_from())["event"] == "joined"
    await communicator.disconnect()
