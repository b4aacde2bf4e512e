import re
from decimal import Decimal

import pytest

from notifications.groups import ADMIN_GROUP, owner_group
from orders.exceptions import DownstreamFailure, InvalidOrderInput, InvalidTransition, OrderNotFound
from orders.models import Order
from orders.services import lifecycle
from orders.signals import order_status_changed
from tests.factories import OrderFactory


@pytest.mark.django_db
def test_create_order_assigns_code_token_total_and_pending_texts(tea_items):
    order = lifecycle.create_order(email="Someone@Example.com ", items=tea_items + [
        {"name": "Samosa", "unit_price": "12.50", "quantity": 3},
    ])

    assert re.match(r"^ORD-\d{6}$", order.order_code)
    assert re.match(r"^\d{3}$", order.token)
    assert order.total_amount == Decimal("77.50")
    assert order.admin_status == Order.STATUS_PENDING
    assert order.user_status == Order.USER_STATUS_TEXT[Order.STATUS_PENDING]
    assert order.notification == "Your order is being processed"
    assert order.email == "someone@example.com"
    assert order.version == 1
    assert [i.name for i in order.items.all()] == ["Tea", "Samosa"]


@pytest.mark.django_db
def test_create_order_defaults_username_from_directory_then_local_part(user, tea_items):
    known = lifecycle.create_order(email=user.email, items=tea_items)
    unknown = lifecycle.create_order(email="walkin@example.com", items=tea_items)
    explicit = lifecycle.create_order(email="walkin@example.com", items=tea_items, username="Asha")

    assert known.username == "Test User"
    assert unknown.username == "walkin"
    assert explicit.username == "Asha"


@pytest.mark.django_db
@pytest.mark.parametrize("items", [
    [],
    None,
    [{"name": "", "unit_price": "5", "quantity": 1}],
    [{"name": "Tea", "unit_price": "-1", "quantity": 1}],
    [{"name": "Tea", "unit_price": "5", "quantity": 0}],
    [{"name": "Tea", "unit_price": "abc", "quantity": 1}],
])
def test_create_order_rejects_bad_items(items):
    with pytest.raises(InvalidOrderInput):
        lifecycle.create_order(email="a@example.com", items=items)
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_create_order_requires_email(tea_items):
    with pytest.raises(InvalidOrderInput):
        lifecycle.create_order(email="  ", items=tea_items)


@pytest.mark.django_db
def test_create_order_notifies_owner_and_admins(live_events, tea_items):
    order = lifecycle.create_order(email="a@example.com", items=tea_items)

    assert live_events.events(owner_group("a@example.com")) == ["order_created"]
    assert live_events.events(ADMIN_GROUP) == ["order_created"]
    owner_payload = live_events.payloads(owner_group(order.email))[0]
    admin_payload = live_events.payloads(ADMIN_GROUP)[0]
    assert owner_payload["notification"] == "Your order is being processed"
    assert "notification" not in admin_payload
    assert admin_payload["orderId"] == order.order_code


@pytest.mark.django_db
def test_accept_from_pending_reissues_token_and_bumps_version(live_events):
    order = OrderFactory(token="007")

    accepted = lifecycle.accept_order(order.pk)

    assert accepted.admin_status == Order.STATUS_ACCEPTED
    assert accepted.notification == "Your order has been accepted and is being prepared"
    assert re.match(r"^\d{3}$", accepted.token)
    assert accepted.version == order.version + 1
    owner_payloads = live_events.payloads(owner_group(order.email))
    assert [p["adminStatus"] for p in owner_payloads] == [Order.STATUS_ACCEPTED]


@pytest.mark.django_db
@pytest.mark.parametrize("status", [
    Order.STATUS_ACCEPTED,
    Order.STATUS_READY,
    Order.STATUS_COLLECTED,
    Order.STATUS_REJECTED,
])
def test_accept_only_from_pending(status, live_events):
    order = OrderFactory(admin_status=status)

    with pytest.raises(InvalidTransition):
        lifecycle.accept_order(order.pk)

    order.refresh_from_db()
    assert order.admin_status == status
    assert live_events.sent == []


@pytest.mark.django_db
def test_ready_requires_accepted_and_repeats_cleanly():
    pending = OrderFactory()
    with pytest.raises(InvalidTransition):
        lifecycle.mark_ready(pending.pk)

    order = OrderFactory(admin_status=Order.STATUS_ACCEPTED)
    first = lifecycle.mark_ready(order.pk)
    again = lifecycle.mark_ready(order.pk)

    assert first.admin_status == again.admin_status == Order.STATUS_READY
    assert again.notification == "Your order is ready for pickup"
    assert again.version == first.version + 1


@pytest.mark.django_db
def test_collected_false_keeps_ready_with_waiting_text():
    order = OrderFactory(admin_status=Order.STATUS_READY)

    waiting = lifecycle.mark_collected(order.pk, False)

    assert waiting.admin_status == Order.STATUS_READY
    assert waiting.user_status == Order.USER_STATUS_TEXT[Order.WAITING]
    assert waiting.notification == "Your order is waiting, please collect it"

    # ready again from waiting restores the plain ready text
    ready = lifecycle.mark_ready(order.pk)
    assert ready.notification == "Your order is ready for pickup"


@pytest.mark.django_db
def test_collected_false_needs_a_ready_order():
    for status in (Order.STATUS_ACCEPTED, Order.STATUS_COLLECTED):
        order = OrderFactory(admin_status=status)
        with pytest.raises(InvalidTransition):
            lifecycle.mark_collected(order.pk, False)


@pytest.mark.django_db
def test_collected_true_from_ready_and_repeat():
    order = OrderFactory(admin_status=Order.STATUS_READY)

    collected = lifecycle.mark_collected(order.pk, True)
    again = lifecycle.mark_collected(order.pk, True)

    assert collected.admin_status == again.admin_status == Order.STATUS_COLLECTED
    assert again.notification == "Thank you! Your order has been collected"

    with pytest.raises(InvalidTransition):
        lifecycle.mark_collected(OrderFactory(admin_status=Order.STATUS_ACCEPTED).pk, True)


@pytest.mark.django_db
def test_reject_pending_flags_order_and_fires_one_event_per_audience(live_events):
    order = OrderFactory()

    rejected = lifecycle.reject_order(order.pk)

    assert rejected.admin_status == Order.STATUS_REJECTED
    assert rejected.admin_deleted is True
    assert rejected.user_status == "Order Rejected"
    assert rejected.notification == (
        "Your order cannot be accepted at the moment. Please try again later!"
    )
    assert live_events.events(owner_group(order.email)) == ["order_rejected"]
    assert live_events.events(ADMIN_GROUP) == ["order_deleted"]


@pytest.mark.django_db
def test_reject_after_accept_is_refused():
    order = OrderFactory(admin_status=Order.STATUS_ACCEPTED)
    with pytest.raises(InvalidTransition):
        lifecycle.reject_order(order.pk)


@pytest.mark.django_db
def test_delete_pending_order_behaves_like_reject(live_events):
    order = OrderFactory()

    deleted, message = lifecycle.delete_order(order.pk)

    assert deleted.admin_status == Order.STATUS_REJECTED
    assert deleted.admin_deleted is True
    assert "rejected" in message.lower()
    assert live_events.events(owner_group(order.email)) == ["order_rejected"]
    assert live_events.events(ADMIN_GROUP) == ["order_deleted"]


@pytest.mark.django_db
def test_delete_accepted_order_is_a_silent_soft_delete(live_events):
    order = OrderFactory(admin_status=Order.STATUS_ACCEPTED)

    deleted, _ = lifecycle.delete_order(order.pk)

    assert deleted.admin_status == Order.STATUS_ACCEPTED
    assert deleted.admin_deleted is True
    assert deleted.notification == order.notification
    assert Order.objects.filter(pk=order.pk).exists()
    assert live_events.events(owner_group(order.email)) == []
    assert live_events.events(ADMIN_GROUP) == ["order_deleted"]


@pytest.mark.django_db
def test_unknown_order_raises_not_found():
    for op in (lifecycle.accept_order, lifecycle.mark_ready, lifecycle.reject_order):
        with pytest.raises(OrderNotFound):
            op(999999)
    with pytest.raises(OrderNotFound):
        lifecycle.mark_collected("not-a-number", True)


@pytest.mark.django_db
def test_transitions_emit_order_status_changed(admin_user):
    order = OrderFactory()
    seen = []

    def _receiver(sender, order, old, new, by_user, **kwargs):
        seen.append((old, new, getattr(by_user, "pk", None)))

    order_status_changed.connect(_receiver)
    try:
        lifecycle.accept_order(order.pk, by_user=admin_user)
        lifecycle.mark_ready(order.pk, by_user=admin_user)
        lifecycle.mark_collected(order.pk, True, by_user=admin_user)
    finally:
        order_status_changed.disconnect(_receiver)

    assert seen == [
        (Order.STATUS_PENDING, Order.STATUS_ACCEPTED, admin_user.pk),
        (Order.STATUS_ACCEPTED, Order.STATUS_READY, admin_user.pk),
        (Order.STATUS_READY, Order.STATUS_COLLECTED, admin_user.pk),
    ]


@pytest.mark.django_db
def test_order_email_cannot_change():
    order = OrderFactory(email="owner@example.com")
    order = Order.objects.get(pk=order.pk)
    order.email = "thief@example.com"

    with pytest.raises(ValueError):
        order.save()


@pytest.mark.django_db
def test_accept_always_hands_out_a_different_token(monkeypatch):
    order = OrderFactory(token="007")
    drawn = iter(["007", "123"])
    monkeypatch.setattr("orders.services.codes.generate_token", lambda rng=None: next(drawn))

    accepted = lifecycle.accept_order(order.pk)

    assert accepted.token == "123"


@pytest.mark.django_db
def test_create_redraws_code_taken_by_a_concurrent_checkout(monkeypatch, tea_items):
    OrderFactory(order_code="ORD-111111")
    drawn = iter(["ORD-111111", "ORD-222222"])
    monkeypatch.setattr(lifecycle, "unique_order_code", lambda: next(drawn))

    order = lifecycle.create_order(email="race@example.com", items=tea_items)

    assert order.order_code == "ORD-222222"
    assert Order.objects.filter(email="race@example.com").count() == 1


@pytest.mark.django_db
def test_create_gives_up_when_every_code_is_taken(monkeypatch, settings, tea_items):
    settings.ORDER_CODE_MAX_ATTEMPTS = 3
    OrderFactory(order_code="ORD-111111")
    monkeypatch.setattr(lifecycle, "unique_order_code", lambda: "ORD-111111")

    with pytest.raises(DownstreamFailure):
        lifecycle.create_order(email="race@example.com", items=tea_items)

    assert not Order.objects.filter(email="race@example.com").exists()
