"""
Domain errors raised by the order services.

They are DRF exceptions so views can let them propagate and the configured
exception handler renders the matching status code.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ValidationError

from core.exceptions import DownstreamFailure

__all__ = [
    "InvalidOrderInput",
    "OrderNotFound",
    "InvalidTransition",
    "DownstreamFailure",
]


class InvalidOrderInput(ValidationError):
    default_detail = "Invalid order input."
    default_code = "invalid_order_input"


class OrderNotFound(NotFound):
    default_detail = "Order not found."
    default_code = "order_not_found"


class InvalidTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This action is not allowed in the order's current status."
    default_code = "invalid_transition"

    def __init__(self, current: str | None = None, target: str | None = None, detail=None):
        if detail is None and current is not None:
            detail = f"Cannot move order from {current} to {target}."
        super().__init__(detail=detail)
        self.current = current
        self.target = target
