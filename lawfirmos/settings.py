# lawfirmos/settings.py

"""
Django settings for the Law Firm Operating System.

Deployment-specific values come from environment variables so the same
settings module serves local development, the test suite and production.
Firm-level business configuration (monthly expenses, cash on hand) lives in
the FinancialSettings singleton, not here.
"""

import os
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# Domain apps are imported as top-level modules (staff, finance, ...)
APPS_DIR = BASE_DIR / 'apps'
if str(APPS_DIR) not in sys.path:
    sys.path.insert(0, str(APPS_DIR))


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# =============================================================================
# CORE
# =============================================================================

SECRET_KEY = os.environ.get(
    'DJANGO_SECRET_KEY',
    'django-insecure-law-firm-os-development-key-change-me'
)

DEBUG = env_bool('DJANGO_DEBUG', default=True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')
    if host.strip()
]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Firm apps
    'utils',
    'core.apps.CoreConfig',
    'staff.apps.StaffConfig',
    'clients.apps.ClientsConfig',
    'finance.apps.FinanceConfig',
    'support.apps.SupportConfig',
    'intel.apps.IntelConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'utils.middleware.AuditContextMiddleware',
]

ROOT_URLCONF = 'lawfirmos.urls'

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

WSGI_APPLICATION = 'lawfirmos.wsgi.application'


# =============================================================================
# DATABASE (Record Store)
# =============================================================================

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('DATABASE_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# =============================================================================
# CACHE (durable local snapshot)
# =============================================================================

SNAPSHOT_CACHE_DIR = os.environ.get('FIRM_SNAPSHOT_CACHE_DIR')

if SNAPSHOT_CACHE_DIR:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.filebased.FileBasedCache',
            'LOCATION': SNAPSHOT_CACHE_DIR,
            'TIMEOUT': None,
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'law-firm-os',
            'TIMEOUT': None,
        }
    }

FIRM_SNAPSHOT_CACHE_KEY = 'law-firm-os-data'
FIRM_SNAPSHOT_CACHE_ENABLED = env_bool('FIRM_SNAPSHOT_CACHE_ENABLED', default=True)


# =============================================================================
# INTERNATIONALIZATION
# =============================================================================

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'America/Chicago')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# FIRM INTELLIGENCE (advisory chat)
# =============================================================================

OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY', '')
FIRM_ADVISOR_MODEL = os.environ.get('FIRM_ADVISOR_MODEL', 'gpt-4o')
FIRM_ADVISOR_HISTORY_LENGTH = 5
FIRM_ADVISOR_RECENT_LOGS = 10


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get('DJANGO_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '[{asctime}] {levelname} {name}: {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
        **{
            name: {
                'handlers': ['console'],
                'level': LOG_LEVEL,
                'propagate': False,
            }
            for name in ('core', 'staff', 'clients', 'finance', 'support', 'intel', 'utils')
        },
    },
}
