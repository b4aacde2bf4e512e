import logging

from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)

# Sent after a lifecycle write: sender=Order, order, old, new, by_user
order_status_changed = Signal()


@receiver(order_status_changed)
def log_status_change(sender, order, old, new, by_user=None, **kwargs):
    logger.info(
        "Order %s moved %s -> %s (version %s, by %s)",
        order.order_code, old or "-", new, order.version,
        getattr(by_user, "pk", None) or "system",
    )
