"""
Gunicorn configuration file for the EazzPay bridge.

Runs the ASGI application with Uvicorn workers. Every parameter can be
overridden through environment variables.
"""

import os

# Server socket
bind = f"0.0.0.0:{os.getenv('GUNICORN_PORT', '8000')}"

# Worker processes
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'uvicorn.workers.UvicornWorker'

# Outbound EazzPay calls may block for PAYMENT_API_TIMEOUT_S, keep the worker timeout above it
timeout = int(os.getenv('GUNICORN_TIMEOUT', '60'))
graceful_timeout = int(os.getenv('GUNICORN_TIMEOUT', '60'))

# Worker lifecycle
max_requests = int(os.getenv('GUNICORN_MAX_REQUESTS', '0'))
max_requests_jitter = int(os.getenv('GUNICORN_MAX_REQUESTS_JITTER', '0'))

loglevel = os.getenv('LOG_LEVEL', 'INFO').lower()

# Same JSON layout as eazzpay_bridge.json_formatter.JSONFormatter
logconfig_dict = {
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
        'gunicorn.access': {
            'level': os.getenv('LOG_LEVEL', 'INFO'),
            'handlers': ['console'],
            'propagate': False,
        },
        'gunicorn.error': {
            'level': os.getenv('LOG_LEVEL', 'INFO'),
            'handlers': ['console'],
            'propagate': False,
        },
    },
}

wsgi_app = 'eazzpay_bridge.asgi:application'
