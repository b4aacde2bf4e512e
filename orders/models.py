from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from .exceptions import InvalidTransition


def q2(val) -> Decimal:
    """Round decimal to 2 places."""
    return Decimal(val).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class OrderQuerySet(models.QuerySet):
    def visible_to_admin(self):
        return self.filter(admin_deleted=False)

    def for_owner(self, email: str):
        return self.filter(email__iexact=(email or "").strip())

    def open(self):
        return self.filter(admin_status__in=Order.OPEN_STATUSES)


class Order(models.Model):
    """
    A customer's order and its place in the pickup workflow.

    ``admin_status`` is the state machine; ``user_status`` and ``notification``
    are derived from it through ``USER_STATUS_TEXT`` / ``NOTIFICATION_TEXT``
    and are never written from client input.
    """

    STATUS_PENDING = "Pending"
    STATUS_ACCEPTED = "Accepted"
    STATUS_READY = "ReadyToServe"
    STATUS_COLLECTED = "Collected"
    STATUS_REJECTED = "Rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_READY, "Ready to serve"),
        (STATUS_COLLECTED, "Collected"),
        (STATUS_REJECTED, "Rejected"),
    ]

    OPEN_STATUSES = (STATUS_PENDING, STATUS_ACCEPTED, STATUS_READY)

    # Repeating ready/collected re-applies the same state
    VALID_STATUS_TRANSITIONS = {
        STATUS_PENDING: [STATUS_ACCEPTED, STATUS_REJECTED],
        STATUS_ACCEPTED: [STATUS_READY],
        STATUS_READY: [STATUS_READY, STATUS_COLLECTED],
        STATUS_COLLECTED: [STATUS_COLLECTED],
        STATUS_REJECTED: [],
    }

    # Ready order that the owner has not picked up yet
    WAITING = "waiting"

    USER_STATUS_TEXT = {
        STATUS_PENDING: "Order placed",
        STATUS_ACCEPTED: "Food is getting prepared",
        STATUS_READY: "Ready to serve",
        WAITING: "Waiting for pickup",
        STATUS_COLLECTED: "Order collected",
        STATUS_REJECTED: "Order Rejected",
    }

    NOTIFICATION_TEXT = {
        STATUS_PENDING: "Your order is being processed",
        STATUS_ACCEPTED: "Your order has been accepted and is being prepared",
        STATUS_READY: "Your order is ready for pickup",
        WAITING: "Your order is waiting, please collect it",
        STATUS_COLLECTED: "Thank you! Your order has been collected",
        STATUS_REJECTED: "Your order cannot be accepted at the moment. Please try again later!",
    }

    order_code = models.CharField(
        max_length=10,
        unique=True,
        help_text="Customer-facing order id, ORD-######",
    )

    username = models.CharField(max_length=150, blank=True)

    email = models.EmailField(
        db_index=True,
        help_text="Owner identity; fixed once the order exists",
    )

    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        help_text="Sum of unit price x quantity, computed at creation",
    )

    token = models.CharField(
        max_length=3,
        help_text="Zero-padded pickup token, 001-999",
    )

    user_status = models.CharField(max_length=100, default=USER_STATUS_TEXT[STATUS_PENDING])

    admin_status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )

    notification = models.CharField(max_length=255, blank=True, default=NOTIFICATION_TEXT[STATUS_PENDING])

    admin_deleted = models.BooleanField(
        default=False,
        help_text="Hidden from the admin board; owner history keeps it",
    )

    version = models.PositiveIntegerField(default=1, help_text="Bumped on every lifecycle write")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["admin_deleted", "-created_at"], name="order_admin_board_idx"),
            models.Index(fields=["email", "-created_at"], name="order_owner_history_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="order_total_amount_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.order_code} ({self.admin_status})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_email = instance.__dict__.get("email")
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, "_loaded_email", None)
        if self.pk and loaded is not None and self.email != loaded:
            raise ValueError("Order email cannot be changed")
        super().save(*args, **kwargs)
        self._loaded_email = self.email

    @property
    def is_open(self) -> bool:
        return self.admin_status in self.OPEN_STATUSES

    def can_transition(self, new_status: str) -> bool:
        return new_status in self.VALID_STATUS_TRANSITIONS.get(self.admin_status, [])

    def apply_status_text(self, key: str) -> None:
        self.user_status = self.USER_STATUS_TEXT[key]
        self.notification = self.NOTIFICATION_TEXT[key]

    def transition_to(self, new_status: str, by_user=None, waiting: bool = False, **changes):
        """
        Perform a validated status transition, persist it and emit
        ``order_status_changed``. Extra ``changes`` (e.g. a fresh token) are
        written in the same save. The caller holds the row lock.
        """
        from .signals import order_status_changed  # to avoid circulars

        old = self.admin_status
        if not self.can_transition(new_status):
            raise InvalidTransition(old, new_status)

        for field, value in changes.items():
            setattr(self, field, value)
        self.admin_status = new_status
        self.apply_status_text(self.WAITING if waiting else new_status)
        self.version = models.F("version") + 1
        self.save(update_fields=[
            "admin_status", "user_status", "notification", "version", "updated_at", *changes.keys(),
        ])
        self.refresh_from_db(fields=["version", "updated_at"])

        order_status_changed.send(sender=Order, order=self, old=old, new=new_status, by_user=by_user)
        return self

    def soft_delete(self) -> None:
        self.admin_deleted = True
        self.version = models.F("version") + 1
        self.save(update_fields=["admin_deleted", "version", "updated_at"])
        self.refresh_from_db(fields=["version", "updated_at"])

    def compute_total(self) -> Decimal:
        return q2(sum((item.line_total for item in self.items.all()), Decimal("0.00")))


class OrderItem(models.Model):
    """One line of an order. Price and quantity are frozen at checkout."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    position = models.PositiveSmallIntegerField(default=0)
    name = models.CharField(max_length=200)
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    feedback = models.TextField(null=True, blank=True)
    feedback_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = "Order item"
        verbose_name_plural = "Order items"
        ordering = ["position", "id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="orderitem_quantity_positive"),
            models.CheckConstraint(condition=models.Q(unit_price__gte=0), name="orderitem_unit_price_non_negative"),
            models.CheckConstraint(
                condition=models.Q(rating__isnull=True) | models.Q(rating__gte=1, rating__lte=5),
                name="orderitem_rating_range",
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.name}"

    @property
    def line_total(self) -> Decimal:
        return q2(self.unit_price * self.quantity)

    def record_feedback(self, rating: int, feedback: str) -> None:
        self.rating = rating
        self.feedback = feedback
        self.feedback_at = timezone.now()
        self.save(update_fields=["rating", "feedback", "feedback_at"])
