import django_filters

from modules.customers.models import Customer


class CustomerFilter(django_filters.FilterSet):
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")
    last_name = django_filters.CharFilter(field_name="last_name", lookup_expr="icontains")
    guest = django_filters.BooleanFilter(field_name="is_guest")
    active = django_filters.BooleanFilter(field_name="is_active")
    group = django_filters.NumberFilter(field_name="groups__id")

    class Meta:
        model = Customer
        fields = ["email", "last_name", "guest", "active", "group"]
