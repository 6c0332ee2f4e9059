"""REST table-store client.

Every clinic record lives in an external, generic table store. Each resource
is CRUD-addressable under ``tables/<resource>``:

- ``GET    tables/<r>``        -> ``{"data": [...]}``
- ``POST   tables/<r>``        -> created entity
- ``PUT    tables/<r>/<id>``   -> updated entity
- ``DELETE tables/<r>/<id>``   -> body is not inspected

The store is treated as an opaque collaborator: no authentication,
pagination or versioning is negotiated, and requests are never retried.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from django.conf import settings

from ehr_dashboard.records.constants import RESOURCES

from .exceptions import (
    TableStoreError,
    TableStorePayloadError,
    TableStoreResponseError,
    TableStoreUnavailable,
    UnknownResourceError,
)

logger = logging.getLogger(__name__)


class TableStoreClient:
    """Thin JSON client for the table store."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json', 'Accept': 'application/json'})

    def __repr__(self) -> str:
        return f'TableStoreClient(base_url={self.base_url!r})'

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    def url_for(self, resource: str, record_id: str | None = None) -> str:
        if resource not in RESOURCES:
            raise UnknownResourceError(f'Unknown table-store resource: {resource}', resource=resource)
        url = f'{self.base_url}/tables/{resource}'
        if record_id is not None:
            url = f'{url}/{record_id}'
        return url

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def list(self, resource: str) -> list[dict[str, Any]]:
        """Return all records of a resource (the ``data`` array of the response)."""
        payload = self._request('GET', resource)
        if not isinstance(payload, dict):
            raise TableStorePayloadError(
                f'Expected a JSON object from tables/{resource}', resource=resource
            )
        data = payload.get('data') or []
        if not isinstance(data, list):
            raise TableStorePayloadError(
                f'"data" of tables/{resource} is not a list', resource=resource
            )
        if not all(isinstance(row, dict) for row in data):
            raise TableStorePayloadError(
                f'"data" of tables/{resource} holds non-object records', resource=resource
            )
        return data

    def create(self, resource: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._request('POST', resource, json=data) or {}

    def update(self, resource: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._request('PUT', resource, record_id=record_id, json=data) or {}

    def delete(self, resource: str, record_id: str) -> None:
        self._request('DELETE', resource, record_id=record_id, expect_body=False)

    def upsert(self, resource: str, data: dict[str, Any], record_id: str | None = None) -> dict[str, Any]:
        """Update when a current record id is tracked, create otherwise."""
        if record_id:
            return self.update(resource, record_id, data)
        return self.create(resource, data)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        resource: str,
        *,
        record_id: str | None = None,
        json: dict[str, Any] | None = None,
        expect_body: bool = True,
    ) -> Any:
        url = self.url_for(resource, record_id)
        logger.debug('table store %s %s', method, url)

        try:
            response = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.exceptions.Timeout as exc:
            raise TableStoreUnavailable(
                f'{method} {url} timed out after {self.timeout}s',
                resource=resource,
                record_id=record_id,
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise TableStoreUnavailable(
                f'{method} {url} failed: {exc}',
                resource=resource,
                record_id=record_id,
            ) from exc

        if not response.ok:
            raise TableStoreResponseError(
                f'{method} {url} returned {response.status_code}',
                status_code=response.status_code,
                body=(response.text or '')[:500],
                resource=resource,
                record_id=record_id,
            )

        if not expect_body or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise TableStorePayloadError(
                f'{method} {url} returned a non-JSON body',
                resource=resource,
                record_id=record_id,
            ) from exc


def get_client() -> TableStoreClient:
    """Build a client from ``TABLE_STORE_URL`` / ``TABLE_STORE_TIMEOUT``."""
    return TableStoreClient(
        base_url=settings.TABLE_STORE_URL,
        timeout=settings.TABLE_STORE_TIMEOUT,
    )


__all__ = ['TableStoreClient', 'TableStoreError', 'get_client']
