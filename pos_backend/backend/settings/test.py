# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory SQLite (no server-side statement timeout; see core.unit_of_work)
- Fast password hashing
- Throttling off so API tests never hit rate limits
- Quiet logs
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK

DEBUG = False

SECRET_KEY = "test-only-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

LIFECYCLE = {
    "MAX_CONCURRENT": 5,
    "ADMISSION_TIMEOUT": 5.0,
    "STATEMENT_TIMEOUT_MS": 15000,
    "ALERT_CATALOG_TTL": 60.0,
}

for _logger in LOGGING["loggers"].values():
    _logger["level"] = "WARNING"
