"""
Test settings for Smart Scheduler.

These settings override the base settings for test environments.
"""

from .base import *  # noqa: F401,F403
from .base import BASE_DIR, REST_FRAMEWORK

SECRET_KEY = "django-insecure-test-key"

# Use regular SQLite database for testing
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",
    }
}

# Locks need a working cache; availability results must not leak between tests
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "smartscheduler-tests",
    }
}
AVAILABILITY_CACHE_TTL = 0
BOOKING_LOCK_TIMEOUT = 0.5

# Use in-memory backend for emails in tests
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Password hashers are slow; use fast ones for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

USE_I18N = False

# Run Celery tasks synchronously in tests
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

MEETING_LINK_PROVIDER = "apps.bookingapp.integrations.meeting_links.NullMeetingLinkProvider"
NOTIFICATION_DISPATCHER = "apps.bookingapp.integrations.notifications.LoggingNotificationDispatcher"

# Disable throttling in tests
REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []

SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# Silence log output during tests (assertLogs still sees records)
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "loggers": {
        "": {
            "handlers": ["null"],
            "level": "CRITICAL",
            "propagate": False,
        },
    },
}
