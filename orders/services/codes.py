"""
Order code and pickup token generation.

Codes are ``ORD-`` plus six digits and unique across all orders; tokens are
three zero-padded digits and unique among open orders, so two customers
waiting at the counter never hold the same number. Generation retries on
collision up to ``ORDER_CODE_MAX_ATTEMPTS`` times.
"""
from __future__ import annotations

import logging
import random
import re
from typing import Callable, Optional

from django.conf import settings

from ..exceptions import DownstreamFailure
from ..models import Order

logger = logging.getLogger(__name__)

ORDER_CODE_PREFIX = "ORD-"
ORDER_CODE_RE = re.compile(r"^ORD-\d{6}$")
TOKEN_RE = re.compile(r"^\d{3}$")

_rng = random.SystemRandom()


def generate_order_code(rng: Optional[random.Random] = None) -> str:
    return f"{ORDER_CODE_PREFIX}{(rng or _rng).randint(100000, 999999)}"


def generate_token(rng: Optional[random.Random] = None) -> str:
    return f"{(rng or _rng).randint(1, 999):03d}"


def max_attempts() -> int:
    return max(1, int(getattr(settings, "ORDER_CODE_MAX_ATTEMPTS", 25)))


def _first_free(kind: str, generate: Callable[[], str], taken: Callable[[str], bool]) -> str:
    attempts = max_attempts()
    for attempt in range(1, attempts + 1):
        candidate = generate()
        if not taken(candidate):
            return candidate
        logger.debug("%s collision on %s (attempt %d/%d)", kind, candidate, attempt, attempts)
    logger.error("Could not allocate a free %s after %d attempts", kind, attempts)
    raise DownstreamFailure(f"Could not allocate a unique {kind}. Please retry.")


def unique_order_code(rng: Optional[random.Random] = None) -> str:
    return _first_free(
        "order code",
        lambda: generate_order_code(rng),
        lambda code: Order.objects.filter(order_code=code).exists(),
    )


def unique_token(
    exclude_pk: Optional[int] = None,
    rng: Optional[random.Random] = None,
    previous: Optional[str] = None,
) -> str:
    """
    Free pickup token. ``exclude_pk`` ignores one order's own row;
    ``previous`` is never handed back, so a re-issued token always changes.
    """

    def taken(token: str) -> bool:
        if previous is not None and token == previous:
            return True
        qs = Order.objects.open().filter(token=token)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        return qs.exists()

    return _first_free("pickup token", lambda: generate_token(rng), taken)
