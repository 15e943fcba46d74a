"""
BOS – Django Settings (Infrastructure Only)
============================================
Django serves as the framework container for BOS.
BOS architecture is the authority — Django does not dictate structure.

The hotel stay engine reads its policy from the HOTEL_STAY dict below.
Every value can be overridden from the environment so a property can
be configured without code changes.
"""

import json
import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("BOS_SECRET_KEY", "bos-dev-key-replace-before-deployment")

DEBUG = os.environ.get("BOS_DEBUG", "1") == "1"

ALLOWED_HOSTS = [
    host for host in os.environ.get("BOS_ALLOWED_HOSTS", "").split(",") if host
]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # ── BOS Modules ───────────────────────────────────────
    "engines.hotel_stay",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# ── Hotel stay engine policy ──────────────────────────────────
HOTEL_STAY = {
    # required at runtime; TenantContext.from_settings refuses a blank id
    "PROPERTY_ID": os.environ.get("HOTEL_STAY_PROPERTY_ID", ""),
    "PROPERTY_TIMEZONE": os.environ.get("HOTEL_STAY_PROPERTY_TIMEZONE", "Asia/Kolkata"),
    "SYSTEM_ACTOR_ID": os.environ.get("HOTEL_STAY_SYSTEM_ACTOR_ID", "system"),
    # name -> percent of the base amount
    "TAX_RATES": json.loads(os.environ.get("HOTEL_STAY_TAX_RATES", '{"GST": 12}')),
    "GRACE_PERIOD": {
        "enabled": os.environ.get("HOTEL_STAY_GRACE_PERIOD_ENABLED", "1") == "1",
        "duration_minutes": int(os.environ.get("HOTEL_STAY_GRACE_PERIOD_MINUTES", "60")),
        "late_fee_per_hour": os.environ.get("HOTEL_STAY_LATE_FEE_PER_HOUR", "100"),
        "max_late_fee": os.environ.get("HOTEL_STAY_MAX_LATE_FEE", "500"),
    },
    "DEFAULT_CHECK_IN_TIME": os.environ.get("HOTEL_STAY_CHECK_IN_TIME", "14:00"),
    "DEFAULT_CHECK_OUT_TIME": os.environ.get("HOTEL_STAY_CHECK_OUT_TIME", "11:00"),
    "TRANSFER_RULES": {
        "max_transfers_per_booking": int(
            os.environ.get("HOTEL_STAY_MAX_TRANSFERS_PER_BOOKING", "3")
        ),
        "allow_different_room_type": os.environ.get(
            "HOTEL_STAY_ALLOW_DIFFERENT_ROOM_TYPE", "1"
        ) == "1",
        "room_type_compatibility": json.loads(
            os.environ.get("HOTEL_STAY_ROOM_TYPE_COMPATIBILITY", "{}")
        ),
        "notify_guest": True,
        "notify_housekeeping": True,
        "notify_management": True,
    },
    "DB_STATEMENT_TIMEOUT_MS": int(os.environ.get("HOTEL_STAY_DB_TIMEOUT_MS", "5000")),
    "NOTIFIER": os.environ.get("HOTEL_STAY_NOTIFIER", "logging"),
    "MANAGEMENT_EMAIL": os.environ.get("HOTEL_STAY_MANAGEMENT_EMAIL", ""),
    "HOUSEKEEPING_EMAIL": os.environ.get("HOTEL_STAY_HOUSEKEEPING_EMAIL", ""),
}

# ── Database ──────────────────────────────────────────────────
# SQLite for development; PostgreSQL when BOS_DB_ENGINE=postgresql.
if os.environ.get("BOS_DB_ENGINE") == "postgresql":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("BOS_DB_NAME", "bos"),
            "USER": os.environ.get("BOS_DB_USER", "bos"),
            "PASSWORD": os.environ.get("BOS_DB_PASSWORD", ""),
            "HOST": os.environ.get("BOS_DB_HOST", "localhost"),
            "PORT": os.environ.get("BOS_DB_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
            "OPTIONS": {
                "timeout": HOTEL_STAY["DB_STATEMENT_TIMEOUT_MS"] / 1000,
            },
        }
    }

# ── Email (notification transport) ────────────────────────────
EMAIL_BACKEND = os.environ.get(
    "BOS_EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend"
)
DEFAULT_FROM_EMAIL = os.environ.get("BOS_DEFAULT_FROM_EMAIL", "frontdesk@bos.local")

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "bos": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "bos",
        },
    },
    "loggers": {
        "bos": {
            "handlers": ["console"],
            "level": os.environ.get("BOS_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
