from __future__ import annotations

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_code", models.CharField(help_text="Customer-facing order id, ORD-######", max_length=10, unique=True)),
                ("username", models.CharField(blank=True, max_length=150)),
                ("email", models.EmailField(db_index=True, help_text="Owner identity; fixed once the order exists", max_length=254)),
                (
                    "total_amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Sum of unit price x quantity, computed at creation",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("token", models.CharField(help_text="Zero-padded pickup token, 001-999", max_length=3)),
                ("user_status", models.CharField(default="Order placed", max_length=100)),
                (
                    "admin_status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Accepted", "Accepted"),
                            ("ReadyToServe", "Ready to serve"),
                            ("Collected", "Collected"),
                            ("Rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="Pending",
                        max_length=20,
                    ),
                ),
                ("notification", models.CharField(blank=True, default="Your order is being processed", max_length=255)),
                ("admin_deleted", models.BooleanField(default=False, help_text="Hidden from the admin board; owner history keeps it")),
                ("version", models.PositiveIntegerField(default=1, help_text="Bumped on every lifecycle write")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["admin_deleted", "-created_at"], name="order_admin_board_idx"),
                    models.Index(fields=["email", "-created_at"], name="order_owner_history_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(total_amount__gte=0), name="order_total_amount_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("name", models.CharField(max_length=200)),
                (
                    "unit_price",
                    models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)]),
                ),
                ("quantity", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                (
                    "rating",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("feedback", models.TextField(blank=True, null=True)),
                ("feedback_at", models.DateTimeField(blank=True, null=True)),
                (
                    "order",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order"),
                ),
            ],
            options={
                "verbose_name": "Order item",
                "verbose_name_plural": "Order items",
                "ordering": ["position", "id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(quantity__gte=1), name="orderitem_quantity_positive"),
                    models.CheckConstraint(condition=models.Q(unit_price__gte=0), name="orderitem_unit_price_non_negative"),
                    models.CheckConstraint(
                        condition=models.Q(rating__isnull=True) | models.Q(rating__gte=1, rating__lte=5),
                        name="orderitem_rating_range",
                    ),
                ],
            },
        ),
    ]
