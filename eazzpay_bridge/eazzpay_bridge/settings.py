"""
Django settings for eazzpay_bridge project.

All deployment-specific values are read from environment variables with
sensible defaults for local development and tests.
"""

import os
from decimal import Decimal
from pathlib import Path


def env_bool(name, default=False):
    return os.getenv(name, str(default)).lower() in ('1', 'true', 'yes')


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-eazzpay-bridge-dev-key')

DEBUG = env_bool('DJANGO_DEBUG', False)

ALLOWED_HOSTS = [h for h in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'payments',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'eazzpay_bridge.urls'

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

WSGI_APPLICATION = 'eazzpay_bridge.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('DATABASE_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('TIME_ZONE', 'Asia/Dhaka')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

# Public host used to build success/cancel/IPN URLs handed to EazzPay
BASE_URL = os.getenv('BASE_URL', 'localhost:8000')

# Store currency used for new orders
STORE_CURRENCY = os.getenv('STORE_CURRENCY', 'BDT')

# EazzPay gateway
EAZZPAY_BASE_URL = os.getenv('EAZZPAY_BASE_URL', '')
EAZZPAY_CLIENT_SECRET = os.getenv('EAZZPAY_CLIENT_SECRET', '')
EAZZPAY_SANDBOX = env_bool('EAZZPAY_SANDBOX', False)
EAZZPAY_EXCHANGE_RATE = Decimal(os.getenv('EAZZPAY_EXCHANGE_RATE', '120'))
EAZZPAY_SETTLEMENT_CURRENCY = os.getenv('EAZZPAY_SETTLEMENT_CURRENCY', 'BDT')
EAZZPAY_DEBUG = env_bool('EAZZPAY_DEBUG', False)
EAZZPAY_IPN_METHOD = os.getenv('EAZZPAY_IPN_METHOD', 'POST')
EAZZPAY_PHYSICAL_PRODUCT_STATUS = os.getenv('EAZZPAY_PHYSICAL_PRODUCT_STATUS', 'processing')
EAZZPAY_DIGITAL_PRODUCT_STATUS = os.getenv('EAZZPAY_DIGITAL_PRODUCT_STATUS', 'completed')
EAZZPAY_VERIFY_ON_RETURN = env_bool('EAZZPAY_VERIFY_ON_RETURN', True)
EAZZPAY_VERIFY_IPN_SECRET = env_bool('EAZZPAY_VERIFY_IPN_SECRET', False)
EAZZPAY_THANK_YOU_URL = os.getenv('EAZZPAY_THANK_YOU_URL', '/checkout/thank-you/')
EAZZPAY_CANCEL_URL = os.getenv('EAZZPAY_CANCEL_URL', '/checkout/')

# Remote API timeout in seconds
PAYMENT_API_TIMEOUT_S = int(os.getenv('PAYMENT_API_TIMEOUT_S', '45'))

# Background verification of orders stuck in 'pending'
VERIFY_PENDING_INTERVAL_S = int(os.getenv('VERIFY_PENDING_INTERVAL_S', '300'))
VERIFY_PENDING_AFTER_S = int(os.getenv('VERIFY_PENDING_AFTER_S', '600'))
VERIFY_PENDING_BATCH_SIZE = int(os.getenv('VERIFY_PENDING_BATCH_SIZE', '50'))

# Celery
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', None)
CELERY_TASK_ALWAYS_EAGER = env_bool('CELERY_TASK_ALWAYS_EAGER', False)
CELERY_BEAT_SCHEDULE = {
    'verify-pending-payments': {
        'task': 'payments.tasks.verify_pending_payments',
        'schedule': VERIFY_PENDING_INTERVAL_S,
    },
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'json': {
            '()': 'eazzpay_bridge.json_formatter.JSONFormatter',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'json',
            'stream': 'ext://sys.stdout',
        },
    },
    'root': {
        'level': os.getenv('LOG_LEVEL', 'INFO'),
        'handlers': ['console'],
    },
    'loggers': {
        'django': {
            'level': os.getenv('LOG_LEVEL', 'INFO'),
            'handlers': ['console'],
            'propagate': False,
        },
    },
}
