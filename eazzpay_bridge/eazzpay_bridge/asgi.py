"""
ASGI config for eazzpay_bridge project, served by Gunicorn with Uvicorn workers.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'eazzpay_bridge.settings')

application = get_asgi_application()
