"""
WSGI config for the tenant dashboard project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'dashboard.config.settings')

application = get_wsgi_application()
