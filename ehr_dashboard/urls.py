"""EHR dashboard URL Configuration.

Routes:
    /                    - Dashboard page, forms and fragments (dashboard)
    /api/dashboard/      - Dashboard JSON (dashboard)
    /api/patients/<id>/  - Patient EHR JSON (dashboard)
    /api/health/         - Health check (core)
"""

from django.urls import include, path

urlpatterns = [
    path("", include("ehr_dashboard.dashboard.urls")),
    path("api/", include("ehr_dashboard.core.urls")),
]
