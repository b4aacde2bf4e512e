"""
Read-side lookups the order and notification code needs about users.

Orders only carry an email; everything else about the owner (display name,
push registration) is resolved here at dispatch time.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.contrib.auth import get_user_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRecord:
    name: str
    device_token: Optional[str]


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _get_user(email: str):
    User = get_user_model()
    return User.objects.filter(email__iexact=normalize_email(email)).first()


def find_user_by_email(email: str | None) -> Optional[UserRecord]:
    if not normalize_email(email):
        return None
    user = _get_user(email)
    if user is None:
        return None
    return UserRecord(name=user.display_name, device_token=user.device_token or None)


def clear_device_token(email: str, token: str | None = None) -> bool:
    """
    Drop a stored push token. When ``token`` is given the stored value must
    still match it, so a token the user re-registered meanwhile is kept.
    """
    user = _get_user(email)
    if user is None or not user.device_token:
        return False
    if token is not None and user.device_token != token:
        return False
    user.clear_device_token()
    logger.info("Cleared device token for %s", normalize_email(email))
    return True
