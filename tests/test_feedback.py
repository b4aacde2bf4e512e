from decimal import Decimal

import pytest

from notifications.groups import ADMIN_GROUP, owner_group
from orders.exceptions import InvalidOrderInput, InvalidTransition, OrderNotFound
from orders.models import Order
from orders.services.feedback import submit_item_feedback
from tests.factories import OrderFactory


@pytest.fixture
def collected_order(db):
    return OrderFactory(
        admin_status=Order.STATUS_COLLECTED,
        items=[
            {"name": "Tea", "unit_price": Decimal("20.00"), "quantity": 2},
            {"name": "Vada", "unit_price": Decimal("15.00"), "quantity": 1},
        ],
    )


def test_feedback_sets_item_fields_and_keeps_total(collected_order, live_events, push_outbox):
    tea = collected_order.items.get(name="Tea")

    order = submit_item_feedback(collected_order.pk, tea.pk, 5, "Great")

    tea.refresh_from_db()
    assert tea.rating == 5
    assert tea.feedback == "Great"
    assert tea.feedback_at is not None
    assert order.total_amount == Decimal("55.00")
    assert order.version == collected_order.version + 1
    assert live_events.events(owner_group(order.email)) == ["order_feedback"]
    assert live_events.events(ADMIN_GROUP) == ["order_feedback"]
    assert push_outbox == []


def test_unknown_item_is_not_found_and_order_unchanged(collected_order, live_events):
    other = OrderFactory(admin_status=Order.STATUS_COLLECTED)
    foreign_item = other.items.first()

    with pytest.raises(OrderNotFound):
        submit_item_feedback(collected_order.pk, foreign_item.pk, 4, "Nice")

    collected_order.refresh_from_db()
    assert collected_order.version == 1
    assert all(i.rating is None and i.feedback is None for i in collected_order.items.all())
    assert live_events.sent == []


def test_unknown_order_is_not_found(db):
    with pytest.raises(OrderNotFound):
        submit_item_feedback(424242, 1, 4, "Nice")


@pytest.mark.parametrize("rating,feedback", [
    (None, "Great"),
    (5, None),
    (5, "   "),
    (0, "Great"),
    (6, "Great"),
    (4.5, "Great"),
    (True, "Great"),
])
def test_invalid_input(collected_order, rating, feedback):
    item = collected_order.items.first()
    with pytest.raises(InvalidOrderInput):
        submit_item_feedback(collected_order.pk, item.pk, rating, feedback)


@pytest.mark.parametrize("status", [Order.STATUS_PENDING, Order.STATUS_ACCEPTED, Order.STATUS_READY])
def test_feedback_waits_for_collection(db, status):
    order = OrderFactory(admin_status=status)
    with pytest.raises(InvalidTransition):
        submit_item_feedback(order.pk, order.items.first().pk, 5, "Great")
