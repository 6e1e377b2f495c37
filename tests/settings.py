# tests/settings.py
import os

os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("POSTGRES_PASSWORD", "unused-in-tests")

from core.settings import *  # noqa: E402,F401,F403

DEBUG = False
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Faster password hashing for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "medvanta-tests",
    }
}

REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []

MEDIA_ROOT = "/tmp/medvanta-test-media"

LOGGING["root"]["level"] = "WARNING"
