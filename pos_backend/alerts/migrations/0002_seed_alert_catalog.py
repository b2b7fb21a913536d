"""
Seed the alert reference rows the stock alert recalculator depends on.
"""

from django.db import migrations

ALERT_TYPES = [
    ("low_stock", "Low stock"),
    ("out_of_stock", "Out of stock"),
    ("expiry", "Expiry"),
    ("price", "Price"),
]

ALERT_PRIORITIES = [
    ("low", "Low", 1),
    ("medium", "Medium", 2),
    ("high", "High", 3),
    ("critical", "Critical", 4),
]

ALERT_STATES = [
    ("active", "Active"),
    ("resolved", "Resolved"),
]


def seed_catalog(apps, schema_editor):
    AlertType = apps.get_model("alerts", "AlertType")
    AlertPriority = apps.get_model("alerts", "AlertPriority")
    AlertState = apps.get_model("alerts", "AlertState")

    for code, name in ALERT_TYPES:
        AlertType.objects.update_or_create(code=code, defaults={"name": name})
    for code, name, rank in ALERT_PRIORITIES:
        AlertPriority.objects.update_or_create(code=code, defaults={"name": name, "rank": rank})
    for code, name in ALERT_STATES:
        AlertState.objects.update_or_create(code=code, defaults={"name": name})


def unseed_catalog(apps, schema_editor):
    apps.get_model("alerts", "AlertType").objects.filter(
        code__in=[c for c, _ in ALERT_TYPES]
    ).delete()
    apps.get_model("alerts", "AlertPriority").objects.filter(
        code__in=[c for c, _, _ in ALERT_PRIORITIES]
    ).delete()
    apps.get_model("alerts", "AlertState").objects.filter(
        code__in=[c for c, _ in ALERT_STATES]
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("alerts", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_catalog, unseed_catalog),
    ]
