"""
ASGI config for the schoolhub project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'schoolhub.settings')

application = get_asgi_application()
