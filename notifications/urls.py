from django.urls import path

from .views import NotifyUserView

app_name = "notifications"

urlpatterns = [
    path("notify-user/", NotifyUserView.as_view(), name="notify_user"),
]
