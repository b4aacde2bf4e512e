"""
Order lifecycle: checkout, accept, ready, collected/waiting, reject, delete.

Every write runs inside ``transaction.atomic()`` holding a row lock on the
order, so transitions on one order are serialized. Notifications go out
after the atomic block, once the new state is stored.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from django.db import IntegrityError, transaction

from accounts.directory import find_user_by_email, normalize_email
from notifications.dispatcher import get_dispatcher

from ..exceptions import DownstreamFailure, InvalidOrderInput, InvalidTransition, OrderNotFound
from ..models import Order, OrderItem, q2
from ..signals import order_status_changed
from .codes import max_attempts, unique_order_code, unique_token

logger = logging.getLogger(__name__)


def _clean_items(items: Optional[Iterable[Mapping[str, Any]]]) -> list[dict]:
    if not items:
        raise InvalidOrderInput({"items": "An order needs at least one item."})
    cleaned = []
    for index, raw in enumerate(items):
        name = str(raw.get("name") or "").strip()
        try:
            unit_price = Decimal(str(raw.get("unit_price")))
            quantity = int(raw.get("quantity"))
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidOrderInput({"items": f"Item {index} needs a numeric unitPrice and quantity."})
        if not name:
            raise InvalidOrderInput({"items": f"Item {index} needs a name."})
        if unit_price < 0 or not unit_price.is_finite():
            raise InvalidOrderInput({"items": f"Item {index} has a negative unitPrice."})
        if quantity < 1:
            raise InvalidOrderInput({"items": f"Item {index} needs a quantity of at least 1."})
        cleaned.append({"name": name, "unit_price": q2(unit_price), "quantity": quantity})
    return cleaned


def _default_username(email: str) -> str:
    record = find_user_by_email(email)
    if record and record.name:
        return record.name
    return email.split("@", 1)[0]


def get_locked_order(order_id) -> Order:
    """Load an order with ``SELECT ... FOR UPDATE``; call inside an atomic block."""
    try:
        pk = int(order_id)
    except (TypeError, ValueError):
        raise OrderNotFound()
    order = Order.objects.select_for_update().filter(pk=pk).first()
    if order is None:
        raise OrderNotFound()
    return order


def fetch_order(order_id) -> Order:
    try:
        return Order.objects.prefetch_related("items").get(pk=int(order_id))
    except (TypeError, ValueError, Order.DoesNotExist):
        raise OrderNotFound()


def _insert_with_free_code(order: Order) -> None:
    """
    Insert a new order, drawing a fresh code when a concurrent checkout
    claimed the same one between the uniqueness check and the insert.
    """
    attempts = max_attempts()
    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                order.save()
            return
        except IntegrityError:
            if not Order.objects.filter(order_code=order.order_code).exists():
                raise
            logger.warning("Order code %s taken at insert (attempt %d/%d)", order.order_code, attempt, attempts)
            order.order_code = unique_order_code()
    logger.error("Could not insert an order with a free code after %d attempts", attempts)
    raise DownstreamFailure("Could not allocate a unique order code. Please retry.")


def create_order(*, email: str, items, username: Optional[str] = None, by_user=None) -> Order:
    email = normalize_email(email)
    if not email:
        raise InvalidOrderInput({"email": "Email is required."})
    lines = _clean_items(items)
    username = (username or "").strip() or _default_username(email)
    total = q2(sum((line["unit_price"] * line["quantity"] for line in lines), Decimal("0.00")))

    with transaction.atomic():
        order = Order(
            order_code=unique_order_code(),
            token=unique_token(),
            username=username,
            email=email,
            total_amount=total,
            admin_status=Order.STATUS_PENDING,
        )
        order.apply_status_text(Order.STATUS_PENDING)
        _insert_with_free_code(order)
        OrderItem.objects.bulk_create([
            OrderItem(order=order, position=position, **line)
            for position, line in enumerate(lines)
        ])

    logger.info("Order %s created for %s (%d items, total %s)", order.order_code, email, len(lines), total)
    order_status_changed.send(sender=Order, order=order, old=None, new=Order.STATUS_PENDING, by_user=by_user)

    order = fetch_order(order.pk)
    get_dispatcher().order_created(order)
    return order


def accept_order(order_id, by_user=None) -> Order:
    with transaction.atomic():
        order = get_locked_order(order_id)
        if not order.can_transition(Order.STATUS_ACCEPTED):
            raise InvalidTransition(order.admin_status, Order.STATUS_ACCEPTED)
        token = unique_token(exclude_pk=order.pk, previous=order.token)
        order.transition_to(Order.STATUS_ACCEPTED, by_user=by_user, token=token)

    order = fetch_order(order.pk)
    get_dispatcher().order_updated(order)
    return order


def mark_ready(order_id, by_user=None) -> Order:
    with transaction.atomic():
        order = get_locked_order(order_id)
        order.transition_to(Order.STATUS_READY, by_user=by_user)

    order = fetch_order(order.pk)
    get_dispatcher().order_updated(order)
    return order


def mark_collected(order_id, collected: bool, by_user=None) -> Order:
    """
    ``collected=True`` finishes the order; ``False`` keeps it ready and nudges
    the owner to come and pick it up.
    """
    with transaction.atomic():
        order = get_locked_order(order_id)
        if collected:
            order.transition_to(Order.STATUS_COLLECTED, by_user=by_user)
        else:
            if order.admin_status != Order.STATUS_READY:
                raise InvalidTransition(
                    detail=f"Only a {Order.STATUS_READY} order can be marked as waiting; it is {order.admin_status}.",
                )
            order.transition_to(Order.STATUS_READY, by_user=by_user, waiting=True)

    order = fetch_order(order.pk)
    get_dispatcher().order_updated(order)
    return order


def reject_order(order_id, by_user=None) -> Order:
    with transaction.atomic():
        order = get_locked_order(order_id)
        order.transition_to(Order.STATUS_REJECTED, by_user=by_user, admin_deleted=True)

    order = fetch_order(order.pk)
    get_dispatcher().order_rejected(order)
    return order


def delete_order(order_id, by_user=None) -> tuple[Order, str]:
    """
    Admin delete. A pending order is rejected (the owner hears about it);
    anything else is only hidden from the admin board.
    """
    with transaction.atomic():
        order = get_locked_order(order_id)
        if order.admin_status == Order.STATUS_PENDING:
            order.transition_to(Order.STATUS_REJECTED, by_user=by_user, admin_deleted=True)
            rejected = True
        else:
            order.soft_delete()
            rejected = False

    order = fetch_order(order.pk)
    if rejected:
        get_dispatcher().order_rejected(order)
        return order, "Order rejected and removed"

    logger.info("Order %s removed from admin board", order.order_code)
    get_dispatcher().order_deleted(order)
    return order, "Order removed"
