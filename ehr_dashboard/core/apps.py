"""
Core App Configuration
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Health check, audit logging and demo data seeding"""
    name = 'ehr_dashboard.core'
    label = 'core'
    verbose_name = 'Core'
