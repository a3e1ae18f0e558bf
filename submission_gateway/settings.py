"""
Django settings for submission_gateway project.

Infrastructure and feature flags come from the environment; resource limits
and languages live in the user customizable YAML config (GATEWAY_CONFIGS).
"""
import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-submission-gateway-dev-key")

DEBUG = _env_flag("DJANGO_DEBUG", False)

ALLOWED_HOSTS = [h for h in os.getenv("DJANGO_ALLOWED_HOSTS", "*").split(",") if h]


INSTALLED_APPS = [
    "submissions",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "submission_gateway.urls"

WSGI_APPLICATION = "submission_gateway.wsgi.application"


if os.getenv("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ["POSTGRES_DB"],
            "USER": os.getenv("POSTGRES_USER", "postgres"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", ""),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": os.getenv("LOG_LEVEL", "INFO"),
    },
}


# Feature flags
ENABLE_WAIT_RESULT = _env_flag("ENABLE_WAIT_RESULT", True)
ENABLE_SUBMISSION_DELETE = _env_flag("ENABLE_SUBMISSION_DELETE", False)

# Admission
MAX_QUEUE_SIZE = int(os.getenv("MAX_QUEUE_SIZE", "100"))

# Task queue
TASK_QUEUE = os.getenv("TASK_QUEUE", "submissions")
QUEUE_MAX_PRIORITY = int(os.getenv("QUEUE_MAX_PRIORITY", "3"))
EXECUTE_SUBMISSION_PRIORITY = int(os.getenv("EXECUTE_SUBMISSION_PRIORITY", "1"))
RETRY_PRIORITY = int(os.getenv("RETRY_PRIORITY", "2"))
MAX_TRIES = int(os.getenv("MAX_TRIES", "3"))

# Execution engine
SANDBOX_EXECUTE_URL = os.getenv("SANDBOX_EXECUTE_URL", "http://localhost:8080/execute")
SANDBOX_TIMEOUT = float(os.getenv("SANDBOX_TIMEOUT", "60"))
CALLBACK_TIMEOUT = float(os.getenv("CALLBACK_TIMEOUT", "5"))

# User customizable configs
USER_CUSTOMIZABLE_CONFIGS = BASE_DIR / "user_customizable_configs"
GATEWAY_CONFIGS = Path(
    os.getenv("GATEWAY_CONFIGS", USER_CUSTOMIZABLE_CONFIGS / "gateway" / "gateway.yaml")
)
