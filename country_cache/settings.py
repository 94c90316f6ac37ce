# country_cache/settings.py
from pathlib import Path
from environs import Env
import os
import dj_database_url

# Initialize Env for reading .env file
env = Env()
env.read_env() # Reads the .env file if there is one

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", default='django-insecure-local-only-5w$0q!r3c4d7k^u1x9z@e2m8n6b-v+t')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env.bool("DEBUG", default=True)

DJANGO_SECRET_ADMIN_URL = env("DJANGO_SECRET_ADMIN_URL", default="admin/")

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["127.0.0.1", "localhost", "testserver"])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=['http://localhost:8000'])


# Application definition

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # 3rd Party Apps
    'rest_framework',
    'drf_yasg',
    'django_filters',
    # Local Apps
    'countries',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    # Whitenoise serves static files in production, right after the security middleware.
    'whitenoise.middleware.WhiteNoiseMiddleware',

    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'country_cache.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'country_cache.wsgi.application'


# DATABASE CONFIGURATION
# Use the DATABASE_URL from the environment, fall back to SQLite for local dev
DATABASES = {
    'default': dj_database_url.config(
        default='sqlite:///' + os.path.join(BASE_DIR, 'db.sqlite3'),
        conn_max_age=600
    )
}


AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]


# DRF CONFIGURATION
REST_FRAMEWORK = {
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
        'rest_framework.filters.OrderingFilter',
    ],
    # Error responses are formatted as {"error": "..."}.
    'EXCEPTION_HANDLER': 'country_cache.exceptions.custom_exception_handler',
}


# EXTERNAL DATA SOURCES
COUNTRIES_API_URL = env(
    "COUNTRIES_API_URL",
    default="https://restcountries.com/v2/all?fields=name,capital,region,population,flag,currencies",
)
EXCHANGE_RATE_API_URL = env("EXCHANGE_RATE_API_URL", default="https://open.er-api.com/v6/latest/USD")
# Seconds allowed for each of the two feed requests.
EXTERNAL_API_TIMEOUT = env.float("EXTERNAL_API_TIMEOUT", default=10.0)


# Internationalization

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC' # Use UTC for consistency

USE_I18N = True

USE_TZ = True # Refresh timestamps are timezone-aware


# Static files (CSS, JavaScript, Images)

STATIC_URL = 'static/'
STATIC_ROOT = os.path.join(BASE_DIR, 'staticfiles')

MEDIA_URL = '/media/'
MEDIA_ROOT = os.path.join(BASE_DIR, 'media')


# SUMMARY IMAGE
# Production filesystems are often read-only apart from /tmp, while the
# local media folder is easier to find during development.
SUMMARY_IMAGE_PATH = env(
    "SUMMARY_IMAGE_PATH",
    default=os.path.join(MEDIA_ROOT, 'cache', 'summary.png') if DEBUG else '/tmp/cache/summary.png',
)
# Optional TrueType font for the summary image; Pillow's default font otherwise.
SNAPSHOT_FONT_PATH = env("SNAPSHOT_FONT_PATH", default=None)


DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# LOGGING CONFIGURATION
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {asctime} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'level': 'DEBUG' if DEBUG else 'INFO', # More verbose in local dev
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': True,
        },
        'django.db.backends': { # Quieter database logs unless there's a problem
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
        'countries': {
            'handlers': ['console'],
            'level': env.log_level("COUNTRIES_LOG_LEVEL", default="DEBUG"),
            'propagate': True,
        },
        'country_cache': {
            'handlers': ['console'],
            'level': 'DEBUG',
            'propagate': False,
        },
    },
}
