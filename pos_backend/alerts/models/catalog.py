# alerts/models/catalog.py

"""
ALERT REFERENCE TABLES

Small, rarely-changing lookup rows (seeded by migration):
- AlertType:     low_stock, out_of_stock, expiry, price
- AlertPriority: low, medium, high, critical (rank orders severity)
- AlertState:    active, resolved

The stock alert recalculator reads them through AlertCatalogCache.
"""

from django.db import models


class AlertType(models.Model):
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    EXPIRY = "expiry"
    PRICE = "price"

    code = models.SlugField(max_length=50, unique=True)
    name = models.CharField(max_length=50, unique=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.name


class AlertPriority(models.Model):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    code = models.SlugField(max_length=50, unique=True)
    name = models.CharField(max_length=50, unique=True)
    rank = models.PositiveSmallIntegerField(
        default=0,
        help_text="Higher rank = more severe.",
    )

    class Meta:
        ordering = ["rank"]
        verbose_name_plural = "alert priorities"

    def __str__(self):
        return self.name


class AlertState(models.Model):
    ACTIVE = "active"
    RESOLVED = "resolved"

    code = models.SlugField(max_length=50, unique=True)
    name = models.CharField(max_length=50, unique=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.name
