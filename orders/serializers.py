from __future__ import annotations

from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    unitPrice = serializers.FloatField(source="unit_price", read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "name", "unitPrice", "quantity", "rating", "feedback"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Owner view of an order, including the user-facing notification."""

    orderId = serializers.CharField(source="order_code", read_only=True)
    totalAmount = serializers.FloatField(source="total_amount", read_only=True)
    userStatus = serializers.CharField(source="user_status", read_only=True)
    adminStatus = serializers.CharField(source="admin_status", read_only=True)
    adminDeleted = serializers.BooleanField(source="admin_deleted", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id", "orderId", "username", "email", "items", "totalAmount", "token",
            "userStatus", "adminStatus", "notification", "adminDeleted", "version",
            "createdAt", "updatedAt",
        ]
        read_only_fields = fields


class AdminOrderSerializer(OrderSerializer):
    """Admin board view: same order without the owner's notification text."""

    class Meta(OrderSerializer.Meta):
        fields = [f for f in OrderSerializer.Meta.fields if f != "notification"]
        read_only_fields = fields


def order_payload(order: Order, audience: str = "owner") -> dict:
    serializer_class = AdminOrderSerializer if audience == "admin" else OrderSerializer
    return dict(serializer_class(order).data)


class OrderItemInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    unitPrice = serializers.DecimalField(source="unit_price", max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150, required=False, allow_blank=True)
    email = serializers.EmailField()
    items = OrderItemInputSerializer(many=True, allow_empty=False)


class CollectedSerializer(serializers.Serializer):
    collected = serializers.BooleanField()


class ItemFeedbackSerializer(serializers.Serializer):
    itemId = serializers.IntegerField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    feedback = serializers.CharField(max_length=2000)
