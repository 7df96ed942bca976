"""
Test settings.

In-memory SQLite and fixed integration secrets so tests never need
external services.
"""

from .base import *  # noqa: F403

DEBUG = False
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

SYNC_API_KEY = "test-sync-key"
COMMAND_CENTRE_VERIFY_URL = "https://command-centre.test/functions/v1/verify-case-access"
COMMAND_CENTRE_API_KEY = "test-command-centre-key"
GEMINI_API_KEY = ""
STYTCH_PROJECT_ID = ""
STYTCH_SECRET = ""
USE_S3_STORAGE = False

LOG_JSON = False
LOG_LEVEL = "WARNING"
