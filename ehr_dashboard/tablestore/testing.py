"""
In-memory stand-in for ``TableStoreClient`` used by the test suites.

It speaks the same interface (list/create/update/delete/upsert), records
every call, and can be told to fail on a given call to exercise the
error paths of the views.
"""
from __future__ import annotations

import copy
import itertools
from typing import Any

from ehr_dashboard.records.constants import RESOURCES

from .exceptions import TableStoreResponseError, UnknownResourceError


class InMemoryTableStore:
    base_url = 'memory://tables'

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None):
        self.tables: dict[str, list[dict[str, Any]]] = {name: [] for name in RESOURCES}
        for name, rows in (tables or {}).items():
            self._check(name)
            self.tables[name] = [copy.deepcopy(r) for r in rows]
        self.calls: list[tuple] = []
        self.failures: dict[tuple, Exception] = {}
        self._ids = itertools.count(1)

    def fail_on(self, method: str, resource: str, record_id: str | None = None, exc: Exception | None = None):
        """Make the next matching call raise (default: a 500 response error)."""
        self.failures[(method, resource, record_id)] = exc or TableStoreResponseError(
            f'{method} tables/{resource} returned 500',
            status_code=500,
            resource=resource,
            record_id=record_id,
        )

    def _check(self, resource: str):
        if resource not in RESOURCES:
            raise UnknownResourceError(f'Unknown table-store resource: {resource}', resource=resource)

    def _maybe_fail(self, method: str, resource: str, record_id: str | None = None):
        for key in ((method, resource, record_id), (method, resource, None)):
            if key in self.failures:
                raise self.failures.pop(key)

    def list(self, resource: str) -> list[dict[str, Any]]:
        self._check(resource)
        self.calls.append(('GET', resource, None))
        self._maybe_fail('GET', resource)
        return copy.deepcopy(self.tables[resource])

    def create(self, resource: str, data: dict[str, Any]) -> dict[str, Any]:
        self._check(resource)
        self.calls.append(('POST', resource, None))
        self._maybe_fail('POST', resource)
        record = dict(data)
        record.setdefault('id', f'{resource}-{next(self._ids)}')
        self.tables[resource].append(record)
        return copy.deepcopy(record)

    def update(self, resource: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        self._check(resource)
        self.calls.append(('PUT', resource, record_id))
        self._maybe_fail('PUT', resource, record_id)
        for row in self.tables[resource]:
            if str(row.get('id')) == str(record_id):
                row.update(data)
                return copy.deepcopy(row)
        raise TableStoreResponseError(
            f'PUT tables/{resource}/{record_id} returned 404',
            status_code=404,
            resource=resource,
            record_id=record_id,
        )

    def delete(self, resource: str, record_id: str) -> None:
        self._check(resource)
        self.calls.append(('DELETE', resource, record_id))
        self._maybe_fail('DELETE', resource, record_id)
        self.tables[resource] = [r for r in self.tables[resource] if str(r.get('id')) != str(record_id)]

    def upsert(self, resource: str, data: dict[str, Any], record_id: str | None = None) -> dict[str, Any]:
        if record_id:
            return self.update(resource, record_id, data)
        return self.create(resource, data)

    def methods(self, method: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == method]
