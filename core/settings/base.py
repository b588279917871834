"""
Shared settings for the campaign dashboard backend.

Environment specific modules (local, dev, staging, prod, test) import
everything from here and override databases, caches and logging.
"""

from datetime import timedelta
from pathlib import Path

from celery.schedules import crontab
from corsheaders.defaults import default_headers
from decouple import config, Csv

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = config("SECRET_KEY", default="dev-only-not-secure")
DEBUG = config("DEBUG", cast=bool, default=False)
ALLOWED_HOSTS = config("DJANGO_ALLOWED_HOSTS", cast=Csv(), default="localhost,127.0.0.1")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "rest_framework_simplejwt",
    "corsheaders",
    "drf_spectacular",
    "apps.authentication",
    "apps.campaigns",
    "apps.integrations",
    "apps.mappings",
    "apps.analytics",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "core.urls"
WSGI_APPLICATION = "core.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

AUTH_USER_MODEL = "authentication.User"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# REST framework
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "apps.authentication.permissions.IsTenantUser",
    ),
    "EXCEPTION_HANDLER": "core.exceptions.api_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=config("JWT_ACCESS_MINUTES", cast=int, default=60)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=config("JWT_REFRESH_DAYS", cast=int, default=7)),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Campaign Dashboard API",
    "VERSION": "1.0.0",
}

# CORS - the dashboard functions answer preflight from any origin
CORS_ALLOW_ALL_ORIGINS = config("CORS_ALLOW_ALL_ORIGINS", cast=bool, default=True)
CORS_ALLOWED_ORIGINS = config("CORS_ALLOWED_ORIGINS", cast=Csv(), default="")
CORS_ALLOW_HEADERS = (*default_headers, "x-client-info", "apikey")

# Cache (form drafts)
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Celery
CELERY_BROKER_URL = config("CELERY_BROKER_URL", default="redis://localhost:6379/0")
CELERY_RESULT_BACKEND = config("CELERY_RESULT_BACKEND", default="redis://localhost:6379/1")
CELERY_RESULT_SERIALIZER = "json"
CELERY_TASK_SERIALIZER = "json"
CELERY_TIMEZONE = "UTC"
CELERY_BEAT_SCHEDULE = {
    "sync-leadprosper-daily-stats": {
        "task": "tasks.sync.sync_leadprosper_daily_stats",
        "schedule": crontab(hour=6, minute=0),  # after the ET day closes
    },
    "sync-hyros-daily-stats": {
        "task": "tasks.sync.sync_hyros_daily_stats",
        "schedule": crontab(hour=6, minute=10),
    },
    "sync-google-ads-daily-stats": {
        "task": "tasks.sync.sync_google_ads_daily_stats",
        "schedule": crontab(hour=6, minute=20),
    },
    "refresh-campaign-snapshots": {
        "task": "tasks.sync.refresh_all_campaign_snapshots",
        "schedule": crontab(hour=6, minute=30),
    },
}

# Upstream platforms
LEADPROSPER_API_URL = config("LEADPROSPER_API_URL", default="https://api.leadprosper.io/public")
LEADPROSPER_TIMEZONE = config("LEADPROSPER_TIMEZONE", default="America/New_York")
STATS_SYNC_TIMEZONE = config("STATS_SYNC_TIMEZONE", default="UTC")
HYROS_API_URL = config("HYROS_API_URL", default="https://api.hyros.com/v1/api/v1.0")
GOOGLE_ADS_API_URL = config("GOOGLE_ADS_API_URL", default="https://googleads.googleapis.com")
GOOGLE_ADS_API_VERSION = config("GOOGLE_ADS_API_VERSION", default="v18")
GOOGLE_ADS_DEVELOPER_TOKEN = config("GOOGLE_ADS_DEVELOPER_TOKEN", default="")

HTTP_CONNECT_TIMEOUT = config("HTTP_CONNECT_TIMEOUT", cast=float, default=5.0)
HTTP_READ_TIMEOUT = config("HTTP_READ_TIMEOUT", cast=float, default=30.0)
HTTP_POOL_MAXSIZE = config("HTTP_POOL_MAXSIZE", cast=int, default=20)

# Dashboard behaviour
UNMAPPED_POLL_INTERVAL_SECONDS = config("UNMAPPED_POLL_INTERVAL_SECONDS", cast=int, default=15 * 60)
FORM_DRAFT_AUTOSAVE_DELAY = config("FORM_DRAFT_AUTOSAVE_DELAY", cast=float, default=1.0)
FORM_DRAFT_TIMEOUT = config("FORM_DRAFT_TIMEOUT", cast=int, default=7 * 24 * 3600)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO"},
        "apps": {"handlers": ["console"], "level": "INFO"},
        "core": {"handlers": ["console"], "level": "INFO"},
        "tasks": {"handlers": ["console"], "level": "INFO"},
    },
}


def cloud_logging_handler():
    """Google Cloud Logging handler for the deployed environments."""
    from google.cloud import logging as cloud_logging
    return cloud_logging.Client().get_default_handler()
