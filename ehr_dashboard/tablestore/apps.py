"""
Table Store App Configuration
"""

from django.apps import AppConfig


class TableStoreConfig(AppConfig):
    """REST table-store client and per-request data cache"""
    name = 'ehr_dashboard.tablestore'
    label = 'tablestore'
    verbose_name = 'Table Store'
