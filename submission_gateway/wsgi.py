"""
WSGI config for submission_gateway project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "submission_gateway.settings")

application = get_wsgi_application()
