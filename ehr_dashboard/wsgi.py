"""
WSGI config for the EHR dashboard.

It exposes the WSGI callable as a module-level variable named ``application``.
"""

import os

from django.core.wsgi import get_wsgi_application

# Deployments set DJANGO_SETTINGS_MODULE=ehr_dashboard.settings_prod.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ehr_dashboard.settings")

application = get_wsgi_application()
