from __future__ import annotations

from typing import Dict, Optional

from django.conf import settings
from django.utils.module_loading import import_string

from .base import BasePushBackend, PushMessage, PushResult

__all__ = ["BasePushBackend", "PushMessage", "PushResult", "get_backend", "send_push"]


def get_backend(path: Optional[str] = None) -> BasePushBackend:
    return import_string(path or settings.PUSH_BACKEND)()


def send_push(device_token: str, title: str, body: str, data: Optional[Dict[str, str]] = None) -> PushResult:
    message = PushMessage(
        device_token=device_token,
        title=title,
        body=body,
        data={str(k): str(v) for k, v in (data or {}).items()},
    )
    return get_backend().send(message)
