"""
WSGI config for eazzpay_bridge project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'eazzpay_bridge.settings')

application = get_wsgi_application()
