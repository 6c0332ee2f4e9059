"""
KPI and aggregation helpers for the EHR dashboard.

All functions are pure: they take the lists mirrored by the ``DataCache``
(or the cache itself) and return counts, filtered lists or dicts. Every
count is a single pass over the table.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from ehr_dashboard.records import constants as c


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_timestamp(value) -> datetime | None:
    """ISO timestamp or date from the table store -> aware datetime."""
    if not value:
        return None
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, datetime.min.time())
    else:
        try:
            result = parse_datetime(str(value))
        except ValueError:
            return None
        if result is None:
            try:
                day = parse_date(str(value))
            except ValueError:
                return None
            if day is None:
                return None
            result = datetime.combine(day, datetime.min.time())
    if timezone.is_naive(result):
        result = timezone.make_aware(result, timezone.get_current_timezone())
    return result


def parse_day(value) -> date | None:
    """Calendar date of a stored value (``2024-03-01`` or a full timestamp)."""
    if not value:
        return None
    if isinstance(value, datetime):
        return timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    try:
        parsed = parse_date(text[:10])
    except ValueError:
        return None
    if parsed is None:
        return None
    if len(text) > 10:
        stamp = parse_timestamp(text)
        if stamp is not None:
            return timezone.localtime(stamp).date()
    return parsed


def _local_today(today: date | None = None) -> date:
    return today or timezone.localdate()


def _sort_key(field: str):
    """Sort by a stored timestamp; undated records sort first."""

    def key(record: dict[str, Any]):
        stamp = parse_timestamp(record.get(field))
        return (0, 0.0) if stamp is None else (1, stamp.timestamp())

    return key


# ---------------------------------------------------------------------------
# Patients
# ---------------------------------------------------------------------------

def calculate_age(date_of_birth, today: date | None = None):
    """Whole years since ``date_of_birth``, or ``"Unknown"``.

    A birth date in the future yields a negative age; it is not clamped.
    """
    birth = parse_day(date_of_birth)
    if birth is None:
        return 'Unknown'
    today = _local_today(today)
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


def calculate_bmi(weight_lbs, height_in) -> float | None:
    """BMI from pounds and inches, rounded to one decimal."""
    if not weight_lbs or not height_in:
        return None
    height_m = float(height_in) * 0.0254
    weight_kg = float(weight_lbs) * 0.453592
    return round(weight_kg / (height_m * height_m), 1)


def patient_name(patient: dict[str, Any] | None) -> str:
    if not patient:
        return c.UNKNOWN_PATIENT
    name = f"{patient.get('first_name') or ''} {patient.get('last_name') or ''}".strip()
    return name or c.UNKNOWN_PATIENT


def search_patients(patients: list[dict[str, Any]], query: str | None) -> list[dict[str, Any]]:
    """Case-insensitive substring match on name, email and phone."""
    query = (query or '').strip().lower()
    if not query:
        return patients

    def matches(patient):
        fields = ('first_name', 'last_name', 'email', 'phone')
        return any(query in str(patient.get(f) or '').lower() for f in fields)

    return [p for p in patients if matches(p)]


def last_completed_visit(appointments: list[dict[str, Any]], patient_id) -> dict[str, Any] | None:
    """Most recent completed appointment of a patient."""
    completed = [
        a for a in appointments
        if str(a.get('patient_id')) == str(patient_id) and a.get('status') == c.APPOINTMENT_COMPLETED
    ]
    if not completed:
        return None
    return max(completed, key=_sort_key('appointment_date'))


def latest_vitals(vitals: list[dict[str, Any]], patient_id) -> dict[str, Any] | None:
    records = [v for v in vitals if str(v.get('patient_id')) == str(patient_id)]
    if not records:
        return None
    return max(records, key=_sort_key('recorded_date'))


# ---------------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------------

def todays_appointments(appointments: list[dict[str, Any]], now: datetime | None = None) -> list[dict[str, Any]]:
    """Appointments on the local calendar day, earliest first."""
    today = timezone.localtime(now or timezone.now()).date()
    result = [a for a in appointments if parse_day(a.get('appointment_date')) == today]
    return sorted(result, key=_sort_key('appointment_date'))


def overdue_appointments(appointments: list[dict[str, Any]], now: datetime | None = None) -> list[dict[str, Any]]:
    """Appointments in the past that are still only ``Scheduled``."""
    now = now or timezone.now()
    result = []
    for appointment in appointments:
        if appointment.get('status') != c.APPOINTMENT_SCHEDULED:
            continue
        start = parse_timestamp(appointment.get('appointment_date'))
        if start is not None and start < now:
            result.append(appointment)
    return result


def filter_appointments(
    appointments: list[dict[str, Any]],
    status: str | None = None,
    on_date: date | None = None,
    patient_id=None,
) -> list[dict[str, Any]]:
    """Appointments matching every given filter, most recent first."""
    result = []
    for appointment in appointments:
        if status and appointment.get('status') != status:
            continue
        if on_date and parse_day(appointment.get('appointment_date')) != on_date:
            continue
        if patient_id and str(appointment.get('patient_id')) != str(patient_id):
            continue
        result.append(appointment)
    return sorted(result, key=_sort_key('appointment_date'), reverse=True)


# ---------------------------------------------------------------------------
# Disease history
# ---------------------------------------------------------------------------

def active_cases(disease_history: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [d for d in disease_history if d.get('status') in c.ACTIVE_DISEASE_STATUSES]


def follow_ups_due(
    disease_history: list[dict[str, Any]],
    today: date | None = None,
    window_days: int = 7,
) -> list[dict[str, Any]]:
    """Records with a follow-up between today and ``window_days`` from now, inclusive."""
    today = _local_today(today)
    result = []
    for disease in disease_history:
        follow_up = parse_day(disease.get('follow_up_date'))
        if follow_up is None:
            continue
        if 0 <= (follow_up - today).days <= window_days:
            result.append(disease)
    return result


# ---------------------------------------------------------------------------
# Medications, labs, messages
# ---------------------------------------------------------------------------

def active_medications(medications: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [m for m in medications if m.get('status') == c.MEDICATION_ACTIVE]


def poor_adherence_medications(medications: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        m for m in medications
        if m.get('adherence_level') == c.ADHERENCE_POOR and m.get('status') == c.MEDICATION_ACTIVE
    ]


def pending_labs(lab_results: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [lab for lab in lab_results if lab.get('status') == c.LAB_PENDING]


def critical_labs(lab_results: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [lab for lab in lab_results if lab.get('status') == c.LAB_CRITICAL]


def unread_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [m for m in messages if m.get('status') == c.MESSAGE_UNREAD]


def count_by(records: Iterable[dict[str, Any]], field: str, default: str = 'Unknown') -> dict[str, int]:
    """Occurrences per value of ``field``, in first-seen order."""
    counts: dict[str, int] = {}
    for record in records:
        key = record.get(field) or default
        counts[key] = counts.get(key, 0) + 1
    return counts


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

def get_dashboard_stats(cache, now: datetime | None = None) -> dict[str, int]:
    """The counters of the dashboard stats strip."""
    now = now or timezone.now()
    today = timezone.localtime(now).date()
    return {
        'total_patients': len(cache.patients),
        'today_appointments': len(todays_appointments(cache.appointments, now=now)),
        'active_cases': len(active_cases(cache.disease_history)),
        'active_medications': len(active_medications(cache.medications)),
        'pending_labs': len(pending_labs(cache.lab_results)),
        'unread_messages': len(unread_messages(cache.messages)),
        'follow_ups_due': len(follow_ups_due(cache.disease_history, today=today)),
        'critical_labs': len(critical_labs(cache.lab_results)),
        'poor_adherence': len(poor_adherence_medications(cache.medications)),
    }


def build_critical_alerts(cache, now: datetime | None = None, limit: int = 5) -> list[dict[str, str]]:
    """Critical labs, then overdue appointments, then poor adherence."""
    patients = {str(p.get('id')): p for p in cache.patients}

    def name_of(record):
        return patient_name(patients.get(str(record.get('patient_id'))))

    alerts = []
    for lab in critical_labs(cache.lab_results):
        alerts.append({
            'type': 'critical',
            'message': f"Critical lab result: {lab.get('test_name')} for {name_of(lab)}",
            'icon': 'fa-flask',
        })
    for appointment in overdue_appointments(cache.appointments, now=now):
        alerts.append({
            'type': 'warning',
            'message': f'Overdue appointment: {name_of(appointment)}',
            'icon': 'fa-calendar-times',
        })
    for medication in poor_adherence_medications(cache.medications):
        alerts.append({
            'type': 'warning',
            'message': f"Poor medication adherence: {medication.get('medication_name')} for {name_of(medication)}",
            'icon': 'fa-pills',
        })
    return alerts[:limit]


# ---------------------------------------------------------------------------
# EHR
# ---------------------------------------------------------------------------

def patient_ehr(cache, patient_id) -> dict[str, Any] | None:
    """Patient plus every child record, newest first where dated."""
    patient = cache.find_patient(patient_id)
    if patient is None:
        return None

    disease_history = cache.for_patient(c.DISEASE_HISTORY, patient_id)
    medications = cache.for_patient(c.MEDICATIONS, patient_id)
    return {
        'patient': patient,
        'name': patient_name(patient),
        'age': calculate_age(patient.get('date_of_birth')),
        'disease_history': disease_history,
        'active_conditions': active_cases(disease_history),
        'vitals': sorted(
            cache.for_patient(c.VITALS, patient_id), key=_sort_key('recorded_date'), reverse=True
        ),
        'latest_vitals': latest_vitals(cache.vitals, patient_id),
        'medications': medications,
        'current_medications': active_medications(medications),
        'lab_results': sorted(
            cache.for_patient(c.LAB_RESULTS, patient_id), key=_sort_key('test_date'), reverse=True
        ),
        'appointments': filter_appointments(cache.appointments, patient_id=patient_id),
        'soap_notes': sorted(
            cache.for_patient(c.SOAP_NOTES, patient_id), key=_sort_key('visit_date'), reverse=True
        ),
        'messages': cache.for_patient(c.MESSAGES, patient_id),
        'last_visit': last_completed_visit(cache.appointments, patient_id),
    }
