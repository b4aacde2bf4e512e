"""
Fan-out of order state changes.

Each change reaches up to three audiences: the owner's room (full order,
including the notification text), the admin group (same order without it)
and the owner's device via push. Every delivery is independent: a failure
is logged and never reaches the caller, whose write already succeeded.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings

from orders.serializers import order_payload

from .groups import ADMIN_GROUP, owner_group
from .registry import registry
from .sinks import ChannelLayerSink, PushSink

logger = logging.getLogger(__name__)

EVENT_CREATED = "order_created"
EVENT_UPDATED = "order_updated"
EVENT_REJECTED = "order_rejected"
EVENT_DELETED = "order_deleted"
EVENT_FEEDBACK = "order_feedback"


class NotificationDispatcher:
    def __init__(self, live=None, push=None):
        self.live = live or ChannelLayerSink()
        self.push = push or PushSink()

    def _emit(self, group: str, event: str, order, audience: str) -> None:
        try:
            self.live.emit(group, event, order_payload(order, audience))
        except Exception:
            logger.exception("Live event %s to %s failed", event, group)

    def notify_owner(self, order, event: str) -> None:
        if not registry.members(order.email):
            logger.debug("No local subscribers for %s; sending %s to the group anyway", order.email, event)
        self._emit(owner_group(order.email), event, order, "owner")

    def notify_admins(self, order, event: str) -> None:
        self._emit(ADMIN_GROUP, event, order, "admin")

    def notify_device(self, order) -> None:
        if not order.notification:
            return
        try:
            self.push.send(
                order.email,
                getattr(settings, "PUSH_DEFAULT_TITLE", "Order Update"),
                order.notification,
                {"orderId": order.order_code, "adminStatus": order.admin_status, "token": order.token},
            )
        except Exception:
            logger.exception("Push for order %s failed", order.order_code)

    def dispatch(self, order, owner_event: Optional[str], admin_event: Optional[str], push: bool = True) -> None:
        logger.debug(
            "Dispatching order %s: owner=%s admin=%s push=%s",
            order.order_code, owner_event, admin_event, push,
        )
        if owner_event:
            self.notify_owner(order, owner_event)
        if admin_event:
            self.notify_admins(order, admin_event)
        if push:
            self.notify_device(order)

    def order_created(self, order) -> None:
        self.dispatch(order, EVENT_CREATED, EVENT_CREATED)

    def order_updated(self, order) -> None:
        self.dispatch(order, EVENT_UPDATED, EVENT_UPDATED)

    def order_rejected(self, order) -> None:
        self.dispatch(order, EVENT_REJECTED, EVENT_DELETED)

    def order_deleted(self, order) -> None:
        """Admin-only removal; the owner keeps the order in their history."""
        self.dispatch(order, None, EVENT_DELETED, push=False)

    def order_feedback(self, order) -> None:
        self.dispatch(order, EVENT_FEEDBACK, EVENT_FEEDBACK, push=False)


_dispatcher: Optional[NotificationDispatcher] = None


def get_dispatcher() -> NotificationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
