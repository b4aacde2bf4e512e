# orders/api_urls.py
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api_views import OrderViewSet

router = DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")

urlpatterns = [
    path("", include(router.urls)),
]

# The router creates the following endpoints:
#
# POST   /api/orders/                     - Place an order
# GET    /api/orders/                     - Admin board (?adminStatus=Pending)
# GET    /api/orders/user/{email}/        - Owner history
# GET    /api/orders/{id}/                - One order (owner or admin)
# PUT    /api/orders/{id}/accept/         - Accept, issues a fresh pickup token
# PUT    /api/orders/{id}/ready/          - Ready to serve
# PUT    /api/orders/{id}/collected/      - {"collected": true|false}
# POST   /api/orders/{id}/reject/         - Reject a pending order
# PUT    /api/orders/{id}/item/feedback/  - {"itemId", "rating", "feedback"}
# DELETE /api/orders/{id}/                - Reject if pending, otherwise hide from board
