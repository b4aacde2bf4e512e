"""
Delivery sinks used by the dispatcher.

Both are best-effort: the dispatcher calls them after the order write has
committed and logs anything they raise.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from accounts.directory import find_user_by_email

logger = logging.getLogger(__name__)

ORDER_EVENT_TYPE = "order.event"


class ChannelLayerSink:
    """Live websocket events through the Channels layer."""

    def emit(self, group: str, event: str, payload: dict) -> None:
        layer = get_channel_layer()
        if layer is None:
            logger.warning("No channel layer configured; dropping %s for %s", event, group)
            return
        async_to_sync(layer.group_send)(group, {
            "type": ORDER_EVENT_TYPE,
            "event": event,
            "order": payload,
        })


class PushSink:
    """Device push via the Celery task; skips users without a registered token."""

    def send(self, email: str, title: str, body: str, data: Optional[Dict[str, str]] = None) -> bool:
        from .tasks import send_push_notification_task

        record = find_user_by_email(email)
        if record is None or not record.device_token:
            logger.info("No device token registered for %s; skipping push", email)
            return False
        send_push_notification_task.delay(email, record.device_token, title, body, data or {})
        return True
