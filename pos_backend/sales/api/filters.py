# sales/api/filters.py

"""
SALE LIST FILTERS

- status: exact status value
- period: today | week | month | year (calendar window in the active
  time zone; weeks start on Monday)
"""

from __future__ import annotations

from datetime import datetime, time, timedelta

import django_filters
from django.utils import timezone

from sales.models import Sale, SaleStatus

PERIOD_CHOICES = (
    ("today", "Today"),
    ("week", "This week"),
    ("month", "This month"),
    ("year", "This year"),
)


def period_bounds(period: str, *, now: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Return [start, end) for the calendar period containing `now`.
    """
    local_now = timezone.localtime(now or timezone.now())
    today = local_now.date()

    if period == "today":
        start = today
        end = today + timedelta(days=1)
    elif period == "week":
        start = today - timedelta(days=today.weekday())
        end = start + timedelta(days=7)
    elif period == "month":
        start = today.replace(day=1)
        end = (start + timedelta(days=32)).replace(day=1)
    elif period == "year":
        start = today.replace(month=1, day=1)
        end = start.replace(year=start.year + 1)
    else:
        raise ValueError(f"Unknown period '{period}'")

    tz = local_now.tzinfo
    return (
        datetime.combine(start, time.min, tzinfo=tz),
        datetime.combine(end, time.min, tzinfo=tz),
    )


class SaleFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=SaleStatus.choices)
    period = django_filters.ChoiceFilter(choices=PERIOD_CHOICES, method="filter_period")

    class Meta:
        model = Sale
        fields = ["status", "period"]

    def filter_period(self, queryset, name, value):
        start, end = period_bounds(value)
        return queryset.filter(sold_at__gte=start, sold_at__lt=end)
