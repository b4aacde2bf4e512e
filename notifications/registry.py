from __future__ import annotations

import threading
from collections import defaultdict

from accounts.directory import normalize_email


class SubscriberRegistry:
    """
    Process-wide map of email rooms to the websocket channels joined to them.

    The channel layer owns delivery; this registry mirrors membership for the
    consumers in this process so a disconnect can leave every room it joined
    and the dispatcher can tell whether anyone local is listening.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._rooms: dict[str, set[str]] = defaultdict(set)
        self._channels: dict[str, set[str]] = defaultdict(set)

    def add(self, email: str, channel: str) -> bool:
        email = normalize_email(email)
        with self._lock:
            if channel in self._rooms[email]:
                return False
            self._rooms[email].add(channel)
            self._channels[channel].add(email)
            return True

    def remove(self, email: str, channel: str) -> bool:
        email = normalize_email(email)
        with self._lock:
            members = self._rooms.get(email)
            if not members or channel not in members:
                return False
            members.discard(channel)
            if not members:
                del self._rooms[email]
            emails = self._channels.get(channel)
            if emails is not None:
                emails.discard(email)
                if not emails:
                    del self._channels[channel]
            return True

    def discard_channel(self, channel: str) -> set[str]:
        """Drop a channel from every room; returns the emails it had joined."""
        with self._lock:
            emails = self._channels.pop(channel, set())
            for email in emails:
                members = self._rooms.get(email)
                if members is None:
                    continue
                members.discard(channel)
                if not members:
                    del self._rooms[email]
            return set(emails)

    def members(self, email: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._rooms.get(normalize_email(email), ()))

    def emails_for(self, channel: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._channels.get(channel, ()))

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()
            self._channels.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)


registry = SubscriberRegistry()
