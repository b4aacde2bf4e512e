import pytest

from notifications.dispatcher import NotificationDispatcher
from notifications.groups import ADMIN_GROUP, owner_group
from notifications.sinks import PushSink
from orders.models import Order
from tests.conftest import RecordingLiveSink
from tests.factories import OrderFactory, UserFactory

pytestmark = pytest.mark.django_db


class RecordingPushSink:
    def __init__(self):
        self.sent = []

    def send(self, email, title, body, data=None):
        self.sent.append((email, title, body, data))
        return True


class ExplodingSink:
    def emit(self, *args, **kwargs):
        raise ConnectionError("channel layer down")

    def send(self, *args, **kwargs):
        raise ConnectionError("push provider down")


def test_updated_order_reaches_owner_admin_and_device():
    live, push = RecordingLiveSink(), RecordingPushSink()
    order = OrderFactory(admin_status=Order.STATUS_ACCEPTED)

    NotificationDispatcher(live=live, push=push).order_updated(order)

    assert live.events(owner_group(order.email)) == ["order_updated"]
    assert live.events(ADMIN_GROUP) == ["order_updated"]
    assert live.payloads(owner_group(order.email))[0]["notification"] == order.notification
    assert "notification" not in live.payloads(ADMIN_GROUP)[0]
    email, title, body, data = push.sent[0]
    assert (email, title, body) == (order.email, "Order Update", order.notification)
    assert data["orderId"] == order.order_code


def test_owner_group_is_case_insensitive():
    assert owner_group("Test@Example.com ") == owner_group("test@example.com")
    assert owner_group("a@example.com") != owner_group("b@example.com")
    assert len(owner_group("someone.with.a.very.long.address@subdomain.example.com")) < 100


def test_live_failure_does_not_block_push_or_raise():
    push = RecordingPushSink()
    order = OrderFactory()

    NotificationDispatcher(live=ExplodingSink(), push=push).order_created(order)

    assert len(push.sent) == 1


def test_push_failure_does_not_block_live_or_raise():
    live = RecordingLiveSink()
    order = OrderFactory()

    NotificationDispatcher(live=live, push=ExplodingSink()).order_rejected(order)

    assert live.events(owner_group(order.email)) == ["order_rejected"]
    assert live.events(ADMIN_GROUP) == ["order_deleted"]


def test_admin_only_delete_and_feedback_skip_push():
    live, push = RecordingLiveSink(), RecordingPushSink()
    order = OrderFactory(admin_status=Order.STATUS_COLLECTED)
    dispatcher = NotificationDispatcher(live=live, push=push)

    dispatcher.order_deleted(order)
    dispatcher.order_feedback(order)

    assert live.events(owner_group(order.email)) == ["order_feedback"]
    assert live.events(ADMIN_GROUP) == ["order_deleted", "order_feedback"]
    assert push.sent == []


def test_push_sink_skips_users_without_token(push_outbox):
    UserFactory(email="notoken@example.com")

    assert PushSink().send("notoken@example.com", "Order Update", "hi") is False
    assert PushSink().send("nobody@example.com", "Order Update", "hi") is False
    assert push_outbox == []


def test_push_sink_queues_delivery(push_outbox):
    UserFactory(email="phone@example.com", device_token="tok-123")

    assert PushSink().send("phone@example.com", "Order Update", "Ready!", {"orderId": "ORD-123456"}) is True

    assert len(push_outbox) == 1
    assert push_outbox[0].device_token == "tok-123"
    assert push_outbox[0].data == {"orderId": "ORD-123456"}


def test_payload_failure_is_contained(monkeypatch):
    push = RecordingPushSink()
    order = OrderFactory(admin_status=Order.STATUS_ACCEPTED)

    def broken_payload(order, audience="owner"):
        raise ValueError("cannot serialize")

    monkeypatch.setattr("notifications.dispatcher.order_payload", broken_payload)

    NotificationDispatcher(live=RecordingLiveSink(), push=push).order_updated(order)

    assert len(push.sent) == 1
