"""
In-memory mirror of the table store.

One ``DataCache`` is built per request and refreshed wholesale; it is never
shared between requests and never written back. A table that fails to load
is logged and mirrored as an empty list so the rest of the page still renders.
"""
from __future__ import annotations

import logging
from typing import Any

from django.utils import timezone

from ehr_dashboard.records.constants import RESOURCES

from .exceptions import TableStoreError, TableStorePayloadError, UnknownResourceError

logger = logging.getLogger(__name__)


class DataCache:
    """Per-request mirror of every table-store resource."""

    def __init__(self, client):
        self.client = client
        self.loaded_at = None
        self.failed_tables: list[str] = []
        for table in RESOURCES:
            setattr(self, table, [])

    def refresh(self) -> 'DataCache':
        """Reload every table. Failing tables become empty lists."""
        self.failed_tables = []
        for table in RESOURCES:
            self.refresh_table(table)
        self.loaded_at = timezone.now()
        if self.failed_tables:
            logger.warning('Data cache refreshed with failures: %s', ', '.join(self.failed_tables))
        return self

    def refresh_table(self, table: str) -> list[dict[str, Any]]:
        if table not in RESOURCES:
            raise UnknownResourceError(f'Unknown table-store resource: {table}', resource=table)
        try:
            rows = self.client.list(table)
            if not all(isinstance(row, dict) for row in rows):
                raise TableStorePayloadError(
                    f'tables/{table} returned non-object records', resource=table
                )
        except TableStoreError:
            logger.exception('Error fetching %s', table)
            if table not in self.failed_tables:
                self.failed_tables.append(table)
            rows = []
        setattr(self, table, rows)
        return rows

    @property
    def ok(self) -> bool:
        return not self.failed_tables

    def table(self, table: str) -> list[dict[str, Any]]:
        if table not in RESOURCES:
            raise UnknownResourceError(f'Unknown table-store resource: {table}', resource=table)
        return getattr(self, table)

    def find(self, table: str, record_id) -> dict[str, Any] | None:
        if record_id in (None, ''):
            return None
        record_id = str(record_id)
        return next((r for r in self.table(table) if str(r.get('id')) == record_id), None)

    def find_patient(self, patient_id) -> dict[str, Any] | None:
        return self.find('patients', patient_id)

    def for_patient(self, table: str, patient_id) -> list[dict[str, Any]]:
        """Child records whose ``patient_id`` matches the selected patient."""
        if patient_id in (None, ''):
            return []
        patient_id = str(patient_id)
        return [r for r in self.table(table) if str(r.get('patient_id')) == patient_id]

    def counts(self) -> dict[str, int]:
        return {table: len(getattr(self, table)) for table in RESOURCES}
