from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings

from accounts.directory import clear_device_token

from .push import send_push

logger = logging.getLogger(__name__)


def retry_countdown(retries: int) -> int:
    """Seconds before the next attempt: PUSH_RETRY_BACKOFF doubled per attempt."""
    return int(settings.PUSH_RETRY_BACKOFF) * (2 ** retries)


@shared_task(bind=True, ignore_result=True, acks_late=True)
def send_push_notification_task(self, email: str, device_token: str, title: str, body: str, data=None):
    """
    Deliver one push. Transient provider failures are retried with exponential
    backoff up to PUSH_MAX_RETRIES; a token the provider reports as
    unregistered is cleared from the user's account.
    """
    result = send_push(device_token, title, body, data)
    if result.ok:
        logger.info("Push delivered to %s (%s)", email, result.message_id or "-")
        return True

    if result.unregistered:
        logger.warning("Push token for %s is no longer registered; clearing it", email)
        clear_device_token(email, device_token)
        return False

    max_retries = int(settings.PUSH_MAX_RETRIES)
    if result.retriable and self.request.retries < max_retries:
        countdown = retry_countdown(self.request.retries)
        logger.warning(
            "Push to %s failed (%s); retry %d/%d in %ss",
            email, result.error or result.status, self.request.retries + 1, max_retries, countdown,
        )
        raise self.retry(countdown=countdown, max_retries=max_retries)

    logger.error("Push to %s failed permanently after %d attempts: %s", email, self.request.retries + 1, result.error)
    return False
