"""Channel layer group names for order events."""
from __future__ import annotations

import hashlib

from accounts.directory import normalize_email

ADMIN_GROUP = "orders.admin"
OWNER_GROUP_PREFIX = "orders.user."


def owner_group(email: str) -> str:
    # Group names only allow [a-zA-Z0-9._-], so the email is hashed
    digest = hashlib.sha256(normalize_email(email).encode("utf-8")).hexdigest()[:40]
    return f"{OWNER_GROUP_PREFIX}{digest}"
