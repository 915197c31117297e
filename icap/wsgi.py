"""
WSGI config for i-CAP.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'icap.settings')

application = get_wsgi_application()
