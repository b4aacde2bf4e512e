import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    adminStatus = django_filters.ChoiceFilter(field_name="admin_status", choices=Order.STATUS_CHOICES)
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")

    class Meta:
        model = Order
        fields = ["adminStatus", "email"]
