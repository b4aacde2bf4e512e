from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from accounts.directory import normalize_email
from core.permissions import is_order_admin, same_email

from .groups import ADMIN_GROUP, owner_group
from .registry import registry

logger = logging.getLogger(__name__)

CLOSE_UNAUTHENTICATED = 4401


class OrderEventsConsumer(AsyncJsonWebsocketConsumer):
    """
    Live order events.

    Staff and operational roles are joined to the admin group on connect.
    Clients join an email room with ``{"action": "join", "email": ...}`` and
    leave it with ``"leave"``; customers may only join their own email.
    Events arrive as ``{"event": <name>, "order": {...}}``.
    """

    async def connect(self):
        self.user = self.scope.get("user")
        self.is_admin = False
        if not self.user or not getattr(self.user, "is_authenticated", False):
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return

        self.is_admin = await database_sync_to_async(is_order_admin)(self.user)
        await self.accept()
        if self.is_admin:
            await self.channel_layer.group_add(ADMIN_GROUP, self.channel_name)
        logger.debug("Socket %s connected (user %s, admin=%s)", self.channel_name, self.user.pk, self.is_admin)

    async def disconnect(self, code):
        for email in registry.discard_channel(self.channel_name):
            await self.channel_layer.group_discard(owner_group(email), self.channel_name)
        if getattr(self, "is_admin", False):
            await self.channel_layer.group_discard(ADMIN_GROUP, self.channel_name)

    async def receive_json(self, content, **kwargs):
        if not isinstance(content, dict):
            await self._error("Messages must be JSON objects.")
            return
        action = content.get("action")
        raw_email = content.get("email")
        if action not in ("join", "leave"):
            await self._error(f"Unknown action: {action!r}")
            return
        if raw_email is not None and not isinstance(raw_email, str):
            await self._error("email must be a string")
            return
        email = normalize_email(raw_email)
        if not email:
            await self._error("email is required")
            return
        if action == "join":
            await self.join_room(email)
        else:
            await self.leave_room(email)

    async def join_room(self, email: str):
        if not self.is_admin and not same_email(email, self.user.email):
            await self._error("You can only join your own order room.")
            return
        await self.channel_layer.group_add(owner_group(email), self.channel_name)
        registry.add(email, self.channel_name)
        await self.send_json({"event": "joined", "email": email})

    async def leave_room(self, email: str):
        if registry.remove(email, self.channel_name):
            await self.channel_layer.group_discard(owner_group(email), self.channel_name)
        await self.send_json({"event": "left", "email": email})

    async def _error(self, message: str):
        await self.send_json({"event": "error", "message": message})

    async def order_event(self, event: dict):
        # event: {"type": "order.event", "event": "...", "order": {...}}
        await self.send_json({"event": event.get("event"), "order": event.get("order", {})})
