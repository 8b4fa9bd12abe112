"""
Test settings for ArtistBook project.

These settings override the base settings for test environments.
"""

from .base import *  # noqa

# Use SQLite for testing
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",  # noqa: F405
    }
}

# Local memory cache backs the calendar locks in tests
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "artistbook-test",
    }
}

# Password hashers are slow; use fast ones for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Make tests faster by avoiding real translations
USE_I18N = False

# Run Celery tasks synchronously in tests
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# Fail fast on lock contention
ARTISTBOOK = {**ARTISTBOOK, "AVAILABILITY_LOCK_TIMEOUT": 1}  # noqa: F405

# Disable logging during tests to speed them up
LOGGING = {
    "version": 1,
    "disable_existing_loggers": True,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "loggers": {
        "": {
            "handlers": ["null"],
            "level": "CRITICAL",
        },
    },
}
