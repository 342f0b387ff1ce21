"""
Development settings for Smart Scheduler.

These settings override the base settings for local development environments.
"""

import os

from .base import *  # noqa: F401,F403
from .base import env

SECRET_KEY = env("SECRET_KEY", "django-insecure-development-key-not-for-production")

DEBUG = env("DEBUG", "True") == "True"

ALLOWED_HOSTS = ["*"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.environ.get("POSTGRES_DB", "smartscheduler"),
        "USER": os.environ.get("POSTGRES_USER", "smartscheduler"),
        "PASSWORD": os.environ.get("POSTGRES_PASSWORD", "smartscheduler"),
        "HOST": os.environ.get("POSTGRES_HOST", "localhost"),
        "PORT": os.environ.get("POSTGRES_PORT", "5432"),
        "CONN_MAX_AGE": 300,
        "OPTIONS": {
            "connect_timeout": 5,
            "sslmode": os.environ.get("POSTGRES_SSL_MODE", "disable"),
        },
        "ATOMIC_REQUESTS": False,
    }
}

if os.environ.get("USE_SQLITE", "False").lower() == "true":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.path.join(BASE_DIR, "db.sqlite3"),  # noqa: F405
        }
    }

# Local memory cache unless Redis is explicitly configured
if not os.environ.get("REDIS_URL"):
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        }
    }

# Run side-effect tasks inline when no broker is around
CELERY_TASK_ALWAYS_EAGER = env("CELERY_TASK_ALWAYS_EAGER", "True") == "True"

EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False
