# backend/settings/prod.py
"""
PATH: backend/settings/prod.py

PRODUCTION SETTINGS

Fail-closed rules:
- DEBUG forced off; SECRET_KEY, ALLOWED_HOSTS, CORS/CSRF origins required
- PostgreSQL only: lifecycle transactions rely on row locks and
  server-side statement/lock timeouts
- Bounded connection wait through the psycopg pool (DB_POOL_TIMEOUT);
  an exhausted pool surfaces as TransientStoreFailure (HTTP 503)
- HTTPS-only origins, hardened cookies, security headers
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import BASE_DIR, LIFECYCLE, MIDDLEWARE, env  # explicit for Ruff (F405)

DEBUG = False


def _require(name: str, value):
    if not value:
        raise ImproperlyConfigured(f"{name} must be set in production.")
    return value


# ----------------------------
# SECRET KEY / HOSTS
# ----------------------------
SECRET_KEY = _require("SECRET_KEY", (env("SECRET_KEY", default="") or "").strip())
if SECRET_KEY == "dev-insecure-change-me":
    raise ImproperlyConfigured("SECRET_KEY must be set to a strong value in production.")

ALLOWED_HOSTS = _require("ALLOWED_HOSTS", env.list("ALLOWED_HOSTS", default=[]))

# ----------------------------
# DATABASE (PostgreSQL + pool)
# ----------------------------
_database_url = _require("DATABASE_URL", (env("DATABASE_URL", default="") or "").strip())
if not _database_url.startswith(("postgres://", "postgresql://", "pgsql://")):
    raise ImproperlyConfigured("DATABASE_URL must point at PostgreSQL in production.")

DATABASES = {"default": env.db("DATABASE_URL")}

# Pooled connections must not also be persistent (CONN_MAX_AGE = 0).
DATABASES["default"]["CONN_MAX_AGE"] = 0
DATABASES["default"].setdefault("OPTIONS", {})["pool"] = {
    "min_size": env.int("DB_POOL_MIN_SIZE", default=1),
    "max_size": env.int("DB_POOL_MAX_SIZE", default=max(10, LIFECYCLE["MAX_CONCURRENT"] * 2)),
    "timeout": env.float("DB_POOL_TIMEOUT", default=10.0),
}

# ----------------------------
# STATIC (admin assets via WhiteNoise)
# ----------------------------
STATIC_ROOT = env("STATIC_ROOT", default=str(BASE_DIR / "staticfiles"))
MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ----------------------------
# TLS behind a proxy
# ----------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=3600)
SECURE_HSTS_INCLUDE_SUBDOMAINS = env.bool("SECURE_HSTS_INCLUDE_SUBDOMAINS", default=True)
SECURE_HSTS_PRELOAD = env.bool("SECURE_HSTS_PRELOAD", default=False)

# ----------------------------
# COOKIES / HEADERS
# ----------------------------
SESSION_COOKIE_SECURE = CSRF_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = CSRF_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = CSRF_COOKIE_SAMESITE = "Lax"

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
SECURE_CROSS_ORIGIN_OPENER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

# ----------------------------
# CORS / CSRF (https only, no loopback)
# ----------------------------
CORS_ALLOWED_ORIGINS = _require(
    "CORS_ALLOWED_ORIGINS", env.list("CORS_ALLOWED_ORIGINS", default=[])
)
CSRF_TRUSTED_ORIGINS = _require(
    "CSRF_TRUSTED_ORIGINS", env.list("CSRF_TRUSTED_ORIGINS", default=[])
)

for _name, _origins in (
    ("CORS_ALLOWED_ORIGINS", CORS_ALLOWED_ORIGINS),
    ("CSRF_TRUSTED_ORIGINS", CSRF_TRUSTED_ORIGINS),
):
    if any("localhost" in o or "127.0.0.1" in o for o in _origins):
        raise ImproperlyConfigured(f"Remove localhost from {_name} in production.")
    if any(not o.startswith("https://") for o in _origins):
        raise ImproperlyConfigured(f"{_name} must be https:// in production.")

CORS_ALLOW_CREDENTIALS = False
