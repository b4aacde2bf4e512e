import logging

from .base import BasePushBackend, PushMessage, PushResult

logger = logging.getLogger(__name__)


class ConsolePushBackend(BasePushBackend):
    """Log pushes instead of sending them (local development)."""

    def send(self, message: PushMessage) -> PushResult:
        logger.info(
            "[push] to=%s... title=%r body=%r data=%s",
            message.device_token[:12], message.title, message.body, message.data,
        )
        return PushResult(ok=True, status=200, message_id="console")
