from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("position", "name", "unit_price", "quantity", "rating", "feedback", "feedback_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_code", "email", "token", "admin_status", "total_amount", "admin_deleted", "created_at")
    list_filter = ("admin_status", "admin_deleted", "created_at")
    search_fields = ("order_code", "email", "username", "token")
    readonly_fields = (
        "order_code", "email", "total_amount", "token", "user_status", "admin_status",
        "notification", "version", "created_at", "updated_at",
    )
    inlines = [OrderItemInline]
    date_hierarchy = "created_at"
