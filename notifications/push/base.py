from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class PushMessage:
    device_token: str
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)


@dataclass
class PushResult:
    ok: bool
    status: int = 0
    error: Optional[str] = None
    # Provider says the token is dead; the stored token should be dropped
    unregistered: bool = False
    # Worth another attempt later (timeouts, 429, 5xx)
    retriable: bool = False
    message_id: Optional[str] = None


class BasePushBackend:
    """Deliver one push message to one device token."""

    def send(self, message: PushMessage) -> PushResult:
        raise NotImplementedError
