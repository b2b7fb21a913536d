# returns/api/filters.py

import django_filters

from returns.models import Return, ReturnStatus


class ReturnFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=ReturnStatus.choices)
    sale_id = django_filters.UUIDFilter(field_name="sale_id")

    class Meta:
        model = Return
        fields = ["status", "sale_id"]
