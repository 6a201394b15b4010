"""WSGI entry point for the sastreria project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "sastreria.settings")

application = get_wsgi_application()
