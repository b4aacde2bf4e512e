# canteen_backend/urls.py
from __future__ import annotations

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from core.views import health_check

urlpatterns = [
    path("health/", health_check, name="health_check"),

    # Django default admin interface
    path("admin/", admin.site.urls),

    # API Documentation
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),

    # Auth (JWT login/refresh + device token registration)
    path("api/auth/", include(("accounts.urls", "accounts"), namespace="accounts")),

    # Order lifecycle REST API
    path("api/", include(("orders.api_urls", "orders_api"), namespace="orders_api")),

    # Ad-hoc admin push
    path("api/", include(("notifications.urls", "notifications"), namespace="notifications")),
]
