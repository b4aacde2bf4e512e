"""
In-memory push backend for tests, in the spirit of Django's locmem email
backend: sent messages collect in ``outbox``; results queued on
``scripted_results`` are returned (in order) instead of a success, which lets
tests simulate provider failures.
"""
from __future__ import annotations

from typing import List

from .base import BasePushBackend, PushMessage, PushResult

outbox: List[PushMessage] = []
attempts: List[PushMessage] = []
scripted_results: List[PushResult] = []


def reset() -> None:
    outbox.clear()
    attempts.clear()
    scripted_results.clear()


class LocMemPushBackend(BasePushBackend):
    def send(self, message: PushMessage) -> PushResult:
        attempts.append(message)
        if scripted_results:
            result = scripted_results.pop(0)
            if result.ok:
                outbox.append(message)
            return result
        outbox.append(message)
        return PushResult(ok=True, status=200, message_id=f"locmem-{len(outbox)}")
