"""
Settings for the blog API.

Everything deployment-specific comes from the environment.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-secret-key-not-for-production")

DEBUG = os.getenv("DJANGO_DEBUG", "true").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = [h.strip() for h in os.getenv("DJANGO_ALLOWED_HOSTS", "*").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django.contrib.sites",
    "django.contrib.sitemaps",
    "django.contrib.staticfiles",
    "rest_framework",
    "rest_framework.authtoken",
    "accounts",
    "blog",
    "comments",
    "pages",
    "uploads",
    "backups",
    "visitors",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "blogsite.urls"

WSGI_APPLICATION = "blogsite.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
            ]
        },
    },
]

BLOG_DB_BACKEND = os.getenv("BLOG_DB_BACKEND", "sqlite3")

if BLOG_DB_BACKEND == "postgresql":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "blog"),
            "USER": os.getenv("POSTGRES_USER", "blog"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", ""),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
            "CONN_MAX_AGE": 60,
        }
    }
elif BLOG_DB_BACKEND == "sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.getenv("SQLITE_PATH", str(BASE_DIR / "blog.sqlite3")),
        }
    }
else:
    raise ValueError(f"Unsupported database backend: {BLOG_DB_BACKEND}")

AUTH_USER_MODEL = "accounts.User"

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("DJANGO_TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

SITE_ID = 1

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = Path(os.getenv("BLOG_MEDIA_ROOT", str(BASE_DIR / "media")))

BLOG_BACKUP_ROOT = Path(os.getenv("BLOG_BACKUP_ROOT", str(BASE_DIR / "backup_files")))

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "backups": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
        "OPTIONS": {"location": str(BLOG_BACKUP_ROOT)},
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# 10 MiB JSON bodies, uploads are bounded separately
DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "blogsite.authentication.BearerTokenAuthentication",
        "rest_framework.authentication.TokenAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": os.getenv("BLOG_THROTTLE_ANON", "400/hour"),
        "user": os.getenv("BLOG_THROTTLE_USER", "2000/hour"),
    },
    "EXCEPTION_HANDLER": "blogsite.exceptions.exception_handler",
}

# Blog behaviour

BLOG_IP_HASH_SALT = os.getenv("BLOG_IP_HASH_SALT", "default-salt-change-in-production")

BLOG_ADMIN_EMAILS = [e.strip() for e in os.getenv("BLOG_ADMIN_EMAILS", "").split(",") if e.strip()]

BLOG_VIEW_WINDOW_HOURS = int(os.getenv("BLOG_VIEW_WINDOW_HOURS", "24"))

BLOG_UPLOAD_MAX_BYTES = int(os.getenv("BLOG_UPLOAD_MAX_BYTES", str(20 * 1024 * 1024)))

BLOG_LOG_LEVEL = os.getenv("BLOG_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        name: {"handlers": ["console"], "level": BLOG_LOG_LEVEL, "propagate": False}
        for name in ("accounts", "blog", "comments", "pages", "uploads", "backups", "visitors", "blogsite")
    },
}
