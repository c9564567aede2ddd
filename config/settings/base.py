"""
Django base settings for the daily_updates project.
Shared settings between development, production and test.

Feed settings control the dashboards' fetch retries, the fetch deadline,
the silent refresh cadence and the local recovery cache.
"""

from pathlib import Path
from decouple import config

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-me-in-production')

# Application definition
DJANGO_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]

THIRD_PARTY_APPS = [
    'django_htmx',
    'django_filters',
]

LOCAL_APPS = [
    'apps.accounts',
    'apps.teams',
    'apps.updates',
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'apps.accounts.middleware.ClientIdMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'django_htmx.middleware.HtmxMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
                'apps.updates.context_processors.user_permissions',
                'apps.updates.context_processors.feed_settings',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


# =============================================================================
# AUTHENTICATION
# =============================================================================
# Users log in by email; roles live on the user model
AUTH_USER_MODEL = 'accounts.User'

AUTHENTICATION_BACKENDS = [
    'apps.accounts.backends.EmailAuthBackend',
    'django.contrib.auth.backends.ModelBackend',
]

LOGIN_URL = 'accounts:login'
LOGIN_REDIRECT_URL = 'updates:my_updates'
LOGOUT_REDIRECT_URL = 'accounts:login'


# =============================================================================
# PASSWORD VALIDATION
# =============================================================================
AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
        'OPTIONS': {
            'min_length': 10,
        }
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]

# Argon2 first; PBKDF2 still verifies older hashes
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.Argon2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2SHA1PasswordHasher',
]


# =============================================================================
# INTERNATIONALIZATION & TIMEZONE
# =============================================================================
LANGUAGE_CODE = 'en-us'

# Date-range filters compare local calendar dates in this zone
TIME_ZONE = config('TIME_ZONE', default='Asia/Kolkata')

USE_I18N = True

USE_TZ = True

# Display formats
DATE_FORMAT = 'j M Y'
TIME_FORMAT = 'g:i A'
DATETIME_FORMAT = 'j M Y, g:i A'
SHORT_DATE_FORMAT = 'd/m/Y'
SHORT_DATETIME_FORMAT = 'd/m/Y g:i A'


# =============================================================================
# STATIC FILES
# =============================================================================
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# SESSION SETTINGS
# =============================================================================
SESSION_ENGINE = 'django.contrib.sessions.backends.db'
SESSION_COOKIE_AGE = config('SESSION_ABSOLUTE_TIMEOUT_HOURS', default=8, cast=int) * 3600
SESSION_EXPIRE_AT_BROWSER_CLOSE = False


# =============================================================================
# CACHE - backs the local recovery cache
# =============================================================================
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'daily-updates',
    }
}


# =============================================================================
# UPDATE FEED SETTINGS
# =============================================================================
# Silent refresh: re-fetch every FEED_REFRESH_INTERVAL seconds, checked on
# every FEED_POLL_INTERVAL seconds tick while the page is visible
FEED_REFRESH_INTERVAL = config('FEED_REFRESH_INTERVAL_SECONDS', default=300, cast=int)
FEED_POLL_INTERVAL = config('FEED_POLL_INTERVAL_SECONDS', default=30, cast=int)

# Upper bound on one fetch, retries included (seconds)
FEED_FETCH_TIMEOUT = config('FEED_FETCH_TIMEOUT_SECONDS', default=20, cast=float)

# Retry delay is FEED_RETRY_BASE_DELAY * attempt number (seconds)
FEED_RETRY_BASE_DELAY = config('FEED_RETRY_BASE_DELAY_SECONDS', default=1.0, cast=float)
FEED_INTERACTIVE_MAX_ATTEMPTS = config('FEED_INTERACTIVE_MAX_ATTEMPTS', default=3, cast=int)
FEED_BACKGROUND_MAX_ATTEMPTS = config('FEED_BACKGROUND_MAX_ATTEMPTS', default=1, cast=int)

# Default date windows (days, inclusive of today)
FEED_PERSONAL_WINDOW_DAYS = 30
FEED_TEAM_WINDOW_DAYS = 7

FEED_PAGE_SIZE = config('FEED_PAGE_SIZE', default=50, cast=int)

# Local recovery cache
RECOVERY_CHUNK_SIZE = config('RECOVERY_CHUNK_SIZE', default=50, cast=int)
RECOVERY_CACHE_TIMEOUT = config('RECOVERY_CACHE_TIMEOUT_DAYS', default=7, cast=int) * 86400

# Signed cookie identifying the browser that owns a recovery snapshot
CLIENT_ID_COOKIE = 'dsr_client'
CLIENT_ID_COOKIE_AGE = 365 * 86400


# =============================================================================
# DEFAULT PRIMARY KEY FIELD TYPE
# =============================================================================
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
