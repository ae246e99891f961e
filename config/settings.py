"""
GuestDesk - Django Settings (Infrastructure Only)
=================================================
Django serves as the HTTP container for GuestDesk.
No models: the hotel backend is reached through the query client.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("GUESTDESK_SECRET_KEY", "guestdesk-dev-key-replace-before-deployment")

DEBUG = os.environ.get("GUESTDESK_DEBUG", "1") == "1"

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("GUESTDESK_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# Routes have no trailing slash.
APPEND_SLASH = False

# ── URL ───────────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"

# ── Database ──────────────────────────────────────────────────
# Unused by GuestDesk itself; Django expects one to be configured.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── GuestDesk ─────────────────────────────────────────────────
GUESTDESK_HOTEL_TIME_ZONE = os.environ.get("GUESTDESK_HOTEL_TIME_ZONE", "Asia/Kolkata")
GUESTDESK_CURRENCY_SYMBOL = os.environ.get("GUESTDESK_CURRENCY_SYMBOL", "₹")
GUESTDESK_LOG_LEVEL = os.environ.get("GUESTDESK_LOG_LEVEL", "INFO")

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "guestdesk": {
            "handlers": ["console"],
            "level": GUESTDESK_LOG_LEVEL,
            "propagate": True,
        },
    },
}
