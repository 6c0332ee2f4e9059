"""
Write operations against the table store.

The views call these after the view state has decided whether a form is
creating or editing a record. Errors propagate as ``TableStoreError`` /
``serializers.ValidationError``; catching and reporting them is the job of
the caller.
"""
from __future__ import annotations

import logging
from typing import Any

from ehr_dashboard.tablestore.exceptions import TableStoreError

from .constants import DISEASE_HISTORY, PATIENTS, RESOURCES
from .serializers import FORM_SERIALIZERS

logger = logging.getLogger(__name__)


class PartialDeleteError(TableStoreError):
    """A patient was deleted but some of its disease history could not be."""

    def __init__(self, message: str, *, remaining: list[str], **kwargs):
        self.remaining = remaining
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result['remaining'] = self.remaining
        return result


def get_form_serializer(form: str, data) -> Any:
    try:
        _, serializer_class = FORM_SERIALIZERS[form]
    except KeyError:
        raise ValueError(f'Unknown form: {form}') from None
    return serializer_class(data=data)


def save_record(client, form: str, data, record_id: str | None = None) -> tuple[dict[str, Any], bool]:
    """Validate a submitted form and upsert it.

    Returns ``(record, created)``. A tracked ``record_id`` selects PUT,
    its absence POST.
    """
    resource, _ = FORM_SERIALIZERS.get(form, (None, None))
    serializer = get_form_serializer(form, data)
    serializer.is_valid(raise_exception=True)
    payload = serializer.to_payload()

    created = not record_id
    record = client.upsert(resource, payload, record_id=record_id)
    logger.info(
        '%s %s record%s',
        'Created' if created else 'Updated',
        resource,
        '' if created else f' {record_id}',
    )
    return record, created


def delete_record(client, resource: str, record_id: str) -> None:
    if resource not in RESOURCES:
        raise ValueError(f'Unknown resource: {resource}')
    client.delete(resource, record_id)
    logger.info('Deleted %s record %s', resource, record_id)


def delete_patient(client, patient_id: str, disease_history: list[dict[str, Any]]) -> int:
    """Delete a patient, then its disease history one record at a time.

    There is no transaction: when a disease-record delete fails the patient
    is already gone and the remaining records stay orphaned in the store.
    Returns the number of disease records deleted.
    """
    client.delete(PATIENTS, patient_id)

    records = [d for d in disease_history if str(d.get('patient_id')) == str(patient_id)]
    deleted = 0
    for record in records:
        try:
            client.delete(DISEASE_HISTORY, record['id'])
        except TableStoreError as exc:
            remaining = [str(r['id']) for r in records[deleted:]]
            logger.error(
                'Patient %s deleted but disease history cleanup stopped; orphaned records: %s',
                patient_id,
                ', '.join(remaining),
            )
            raise PartialDeleteError(
                f'Deleted patient {patient_id} but {len(remaining)} disease records remain',
                remaining=remaining,
                resource=DISEASE_HISTORY,
                record_id=str(record['id']),
            ) from exc
        deleted += 1

    logger.info('Deleted patient %s and %d disease records', patient_id, deleted)
    return deleted
