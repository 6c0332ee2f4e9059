"""Core App URLs - Health.

Prefix: /api/
Routes:
    GET  /api/health/       - Health check (no auth)
"""

from django.urls import path

from ehr_dashboard.core.views import health

app_name = 'core'

urlpatterns = [
    # Health check
    path('health/', health, name='health'),
]
