from .accounts import UserFactory, AdminUserFactory
from .orders import OrderFactory, OrderItemFactory

__all__ = [
    "UserFactory",
    "AdminUserFactory",
    "OrderFactory",
    "OrderItemFactory",
]
