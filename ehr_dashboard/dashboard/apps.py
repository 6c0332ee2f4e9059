"""
Dashboard App Configuration
"""

from django.apps import AppConfig


class DashboardConfig(AppConfig):
    """EHR dashboard: sections, EHR modal, forms and JSON endpoints"""
    name = 'ehr_dashboard.dashboard'
    label = 'dashboard'
    verbose_name = 'EHR Dashboard'
