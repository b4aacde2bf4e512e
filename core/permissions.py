from __future__ import annotations

from django.conf import settings
from rest_framework.permissions import BasePermission


ROLE_MANAGER = "Manager"
ROLE_CASHIER = "Cashier"
ROLE_KITCHEN = "Kitchen"

ALL_ROLES = (ROLE_MANAGER, ROLE_CASHIER, ROLE_KITCHEN)


def user_roles(user) -> list[str]:
    if not user or not getattr(user, "is_authenticated", False):
        return []
    return list(user.groups.values_list("name", flat=True))


def admin_roles() -> set[str]:
    return set(getattr(settings, "ORDER_ADMIN_ROLES", ALL_ROLES) or ())


def is_order_admin(user) -> bool:
    """Staff, superusers and members of an ORDER_ADMIN_ROLES group run the order board."""
    if not user or not getattr(user, "is_authenticated", False):
        return False
    if user.is_staff or user.is_superuser:
        return True
    return bool(admin_roles().intersection(user_roles(user)))


def same_email(a: str | None, b: str | None) -> bool:
    return bool(a) and bool(b) and a.strip().lower() == b.strip().lower()


class IsOrderAdmin(BasePermission):
    """Staff or operational roles (Manager, Cashier, Kitchen by default)."""

    message = "Order admin role required."

    def has_permission(self, request, view):
        return is_order_admin(request.user)


class IsOrderOwnerOrAdmin(BasePermission):
    """Object-level: the order's email matches the requester, or the requester is an admin."""

    message = "You do not have access to this order."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if is_order_admin(request.user):
            return True
        return same_email(getattr(obj, "email", None), getattr(request.user, "email", None))
