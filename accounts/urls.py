# accounts/urls.py
from django.urls import path

from .views import DeviceTokenStatusView, DeviceTokenView, LoginView, RefreshView

app_name = "accounts"

urlpatterns = [
    path("login/", LoginView.as_view(), name="jwt_login"),
    path("token/refresh/", RefreshView.as_view(), name="jwt_refresh"),
    path("device-token/", DeviceTokenView.as_view(), name="device_token"),
    path("device-token/<str:email>/", DeviceTokenStatusView.as_view(), name="device_token_status"),
]
