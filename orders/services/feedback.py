from __future__ import annotations

import logging

from django.db import transaction

from notifications.dispatcher import get_dispatcher

from ..exceptions import InvalidOrderInput, InvalidTransition, OrderNotFound
from ..models import Order
from .lifecycle import fetch_order, get_locked_order

logger = logging.getLogger(__name__)

RATING_MIN = 1
RATING_MAX = 5


def _clean_rating(rating) -> int:
    if rating is None or isinstance(rating, bool):
        raise InvalidOrderInput({"rating": "Rating is required."})
    try:
        value = int(rating)
    except (TypeError, ValueError):
        raise InvalidOrderInput({"rating": "Rating must be a whole number."})
    if value != rating and str(value) != str(rating).strip():
        raise InvalidOrderInput({"rating": "Rating must be a whole number."})
    if not RATING_MIN <= value <= RATING_MAX:
        raise InvalidOrderInput({"rating": f"Rating must be between {RATING_MIN} and {RATING_MAX}."})
    return value


def submit_item_feedback(order_id, item_id, rating, feedback, by_user=None) -> Order:
    """
    Store a rating and comment on one line of a collected order, then push the
    refreshed order to the owner and admin channels. ``total_amount`` is left
    untouched.
    """
    value = _clean_rating(rating)
    text = (feedback or "").strip() if isinstance(feedback, str) else None
    if not text:
        raise InvalidOrderInput({"feedback": "Feedback is required."})

    with transaction.atomic():
        order = get_locked_order(order_id)
        try:
            item = order.items.filter(pk=int(item_id)).first()
        except (TypeError, ValueError):
            item = None
        if item is None:
            raise OrderNotFound("Item not found in this order.")
        if order.admin_status != Order.STATUS_COLLECTED:
            raise InvalidTransition(
                detail=f"Feedback is accepted once the order is {Order.STATUS_COLLECTED}; it is {order.admin_status}.",
            )
        item.record_feedback(value, text)
        order.version += 1
        order.save(update_fields=["version", "updated_at"])

    logger.info("Feedback %s/5 on item %s of order %s", value, item.pk, order.order_code)
    order = fetch_order(order.pk)
    get_dispatcher().order_feedback(order)
    return order
