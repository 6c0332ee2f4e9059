"""
Exceptions raised by the table-store client.

The views translate every one of these into the same generic error
message; the hierarchy exists so that logs say what actually went wrong.
"""

from __future__ import annotations

from typing import Any


class TableStoreError(Exception):
    """Base exception for all table-store failures."""

    def __init__(self, message: str, *, resource: str | None = None, record_id: str | None = None):
        self.message = message
        self.resource = resource
        self.record_id = record_id
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {'detail': self.message}
        if self.resource:
            result['resource'] = self.resource
        if self.record_id:
            result['record_id'] = self.record_id
        return result


class UnknownResourceError(TableStoreError):
    """Raised for a resource name that is not part of the table-store contract."""
    pass


class TableStoreUnavailable(TableStoreError):
    """Raised when the table store cannot be reached (connection error, timeout)."""
    pass


class TableStoreResponseError(TableStoreError):
    """
    Raised when the table store answers with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the store
        body: First part of the response body, for logging
    """

    def __init__(self, message: str, *, status_code: int, body: str = '', **kwargs):
        self.status_code = status_code
        self.body = body
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result['status_code'] = self.status_code
        return result


class TableStorePayloadError(TableStoreError):
    """Raised when a response body is not the JSON object the contract promises."""
    pass
