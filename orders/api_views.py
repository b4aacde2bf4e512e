from __future__ import annotations

from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsOrderAdmin, IsOrderOwnerOrAdmin, is_order_admin, same_email

from .filters import OrderFilter
from .models import Order
from .serializers import (
    AdminOrderSerializer,
    CollectedSerializer,
    ItemFeedbackSerializer,
    OrderCreateSerializer,
    OrderSerializer,
)
from .services import feedback, lifecycle


class OrderViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Order lifecycle endpoints.

    Customers place orders and follow them through ``/orders/user/{email}/``;
    staff and operational roles (Manager, Cashier, Kitchen) drive the state
    machine and see the admin board at ``/orders/``.
    """

    queryset = Order.objects.prefetch_related("items")
    lookup_value_regex = r"\d+"
    pagination_class = None
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "updated_at", "total_amount"]
    ordering = ["-created_at"]

    ADMIN_ACTIONS = {"list", "accept", "ready", "collected", "reject", "destroy"}

    def get_permissions(self):
        if self.action in self.ADMIN_ACTIONS:
            return [IsOrderAdmin()]
        if self.action in {"retrieve", "item_feedback"}:
            return [IsOrderOwnerOrAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action == "list":
            return qs.visible_to_admin()
        return qs

    def get_serializer_class(self):
        if self.action == "list":
            return AdminOrderSerializer
        if self.action == "create":
            return OrderCreateSerializer
        return OrderSerializer

    def _render(self, order, code=status.HTTP_200_OK):
        """Admins get the board view, owners get their own view with the notification text."""
        serializer_class = AdminOrderSerializer if is_order_admin(self.request.user) else OrderSerializer
        return Response(serializer_class(order, context=self.get_serializer_context()).data, status=code)

    @extend_schema(request=OrderCreateSerializer, responses={201: OrderSerializer})
    def create(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if not is_order_admin(request.user) and not same_email(data["email"], request.user.email):
            raise PermissionDenied("You can only place orders for your own email.")
        order = lifecycle.create_order(
            email=data["email"],
            items=data["items"],
            username=data.get("username"),
            by_user=request.user,
        )
        return self._render(order, status.HTTP_201_CREATED)

    @extend_schema(responses=OrderSerializer)
    def retrieve(self, request, pk=None):
        return self._render(self.get_object())

    @extend_schema(responses=OrderSerializer(many=True))
    @action(detail=False, methods=["get"], url_path=r"user/(?P<email>[^/]+)")
    def by_user(self, request, email=None):
        """Owner history, including orders the admin board has hidden."""
        if not is_order_admin(request.user) and not same_email(email, request.user.email):
            raise PermissionDenied("You can only view your own orders.")
        orders = Order.objects.for_owner(email).prefetch_related("items").order_by("-created_at")
        return Response(OrderSerializer(orders, many=True).data)

    @extend_schema(request=None, responses=AdminOrderSerializer)
    @action(detail=True, methods=["put"])
    def accept(self, request, pk=None):
        return self._render(lifecycle.accept_order(pk, by_user=request.user))

    @extend_schema(request=None, responses=AdminOrderSerializer)
    @action(detail=True, methods=["put"])
    def ready(self, request, pk=None):
        return self._render(lifecycle.mark_ready(pk, by_user=request.user))

    @extend_schema(request=CollectedSerializer, responses=AdminOrderSerializer)
    @action(detail=True, methods=["put"])
    def collected(self, request, pk=None):
        serializer = CollectedSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = lifecycle.mark_collected(pk, serializer.validated_data["collected"], by_user=request.user)
        return self._render(order)

    @extend_schema(request=None, responses=AdminOrderSerializer)
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        return self._render(lifecycle.reject_order(pk, by_user=request.user))

    @extend_schema(request=ItemFeedbackSerializer, responses=OrderSerializer)
    @action(detail=True, methods=["put"], url_path="item/feedback")
    def item_feedback(self, request, pk=None):
        order = get_object_or_404(Order, pk=pk)
        self.check_object_permissions(request, order)
        serializer = ItemFeedbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order = feedback.submit_item_feedback(
            order.pk, data["itemId"], data["rating"], data["feedback"], by_user=request.user,
        )
        return self._render(order)

    def destroy(self, request, pk=None):
        order, message = lifecycle.delete_order(pk, by_user=request.user)
        return Response({"message": message, "orderId": order.order_code})
