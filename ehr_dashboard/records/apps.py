"""
Records App Configuration
"""

from django.apps import AppConfig


class RecordsConfig(AppConfig):
    """Clinic record vocabulary, form serializers and write services"""
    name = 'ehr_dashboard.records'
    label = 'records'
    verbose_name = 'Records'
