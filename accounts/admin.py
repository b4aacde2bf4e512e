from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ("username", "email", "first_name", "last_name", "is_staff", "has_device_token")
    search_fields = ("username", "email", "first_name", "last_name")
    readonly_fields = ("device_token_updated_at", "last_login", "date_joined")

    fieldsets = DjangoUserAdmin.fieldsets + (
        (_("Push notifications"), {"fields": ("device_token", "device_token_updated_at")}),
    )

    @admin.display(boolean=True, description="Push")
    def has_device_token(self, obj):
        return bool(obj.device_token)
