"""
HTML fragments of the dashboard.

Each ``render_*`` function takes records (plus whatever related records it
needs) and returns escaped markup built with ``format_html``. They hold no
state and never touch the table store, so a view can return any of them on
its own for a partial refresh, or compose them into the full page.
"""
from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from django.urls import reverse
from django.utils import timezone
from django.utils.html import format_html, format_html_join, json_script
from django.utils.safestring import SafeString, mark_safe

from ehr_dashboard.records import constants as c

from . import kpis
from .state import EHR_TABS, SECTIONS
from .widgets import (
    get_adherence_color,
    get_lab_status_color,
    get_severity_color,
    get_status_color,
)

EMPTY = mark_safe('')

SECTION_LABELS = {
    'dashboard': 'Dashboard',
    'patients': 'Patients',
    'appointments': 'Appointments',
    'labResults': 'Lab Results',
    'messages': 'Messages',
    'analytics': 'Analytics',
}

EHR_TAB_LABELS = {
    'overview': 'Overview',
    'vitals': 'Vital Signs',
    'medications': 'Medications',
    'lab-results': 'Lab Results',
    'appointments': 'Appointments',
    'notes': 'Clinical Notes',
}

DELETE_PATIENT_CONFIRM = 'Are you sure you want to delete this patient? This action cannot be undone.'
DELETE_DISEASE_CONFIRM = 'Are you sure you want to delete this disease history record?'
DELETE_RECORD_CONFIRM = 'Are you sure you want to delete this record?'


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _or(value, default='N/A'):
    return default if value in (None, '') else value


def format_day(value, default='N/A') -> str:
    day = kpis.parse_day(value)
    if day is None:
        return default
    return f'{day.month}/{day.day}/{day.year}'


def format_time(value, default='') -> str:
    stamp = kpis.parse_timestamp(value)
    if stamp is None:
        return default
    return timezone.localtime(stamp).strftime('%I:%M %p')


def _url(name: str, *args, **query) -> str:
    url = reverse(f'dashboard:{name}', args=args)
    query = {k: v for k, v in query.items() if v not in (None, '')}
    if query:
        url = f'{url}?{urlencode(query)}'
    return url


def _badge(label, css: str) -> SafeString:
    return format_html('<span class="px-2 py-1 text-xs rounded-full {}">{}</span>', css, label)


def _empty(text: str, centered: bool = False) -> SafeString:
    if centered:
        return format_html('<div class="text-center py-8"><p class="text-gray-500">{}</p></div>', text)
    return format_html('<p class="text-gray-500 text-sm">{}</p>', text)


def _csrf_input(csrf_token: str) -> SafeString:
    if not csrf_token:
        return EMPTY
    return format_html('<input type="hidden" name="csrfmiddlewaretoken" value="{}">', csrf_token)


def _post_button(url: str, label: str, csrf_token: str, confirm: str = '', css: str = 'text-medical-red') -> SafeString:
    return format_html(
        '<form method="post" action="{}" class="inline" data-confirm="{}"'
        ' onsubmit="return !this.dataset.confirm || window.confirm(this.dataset.confirm);">{}'
        '<button type="submit" class="{}"><i class="fas fa-trash"></i> {}</button></form>',
        url, confirm, _csrf_input(csrf_token), css, label,
    )


def _link(url: str, label: str, icon: str, css: str) -> SafeString:
    return format_html('<a href="{}" class="{}"><i class="fas {}"></i> {}</a>', url, css, icon, label)


def _rows(rows: list[tuple[str, Any]]) -> SafeString:
    return format_html_join(
        '',
        '<div class="flex justify-between"><span class="font-medium text-gray-700">{}:</span> <span>{}</span></div>',
        rows,
    )


def _join(parts) -> SafeString:
    return format_html_join('', '{}', ((part,) for part in parts))


def patients_by_id(patients: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    return {str(p.get('id')): p for p in patients}


def _name_for(record: dict[str, Any], patients: dict[str, dict[str, Any]]) -> str:
    return kpis.patient_name(patients.get(str(record.get('patient_id'))))


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

def render_nav(current_section: str) -> SafeString:
    items = format_html_join(
        '',
        '<a href="{}" class="nav-item {}" data-section="{}">{}</a>',
        (
            (
                _url('section', name),
                'active' if name == current_section else '',
                name,
                SECTION_LABELS[name],
            )
            for name in SECTIONS
        ),
    )
    return format_html('<nav class="flex space-x-4">{}</nav>', items)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

def render_stats(cards: list[dict[str, Any]]) -> SafeString:
    """Stats strip from ``widgets.build_kpi_cards``."""
    items = format_html_join(
        '',
        '<div class="bg-white rounded-lg shadow p-4" data-kpi="{}">'
        '<i class="fas {} {}"></i>'
        '<div class="text-sm text-gray-600">{}</div>'
        '<div class="text-2xl font-bold" id="{}">{}</div>'
        '{}</div>',
        (
            (
                card['key'],
                card['icon'],
                card['color'],
                card['title'],
                card['key'],
                card['value'],
                format_html('<div class="text-xs text-gray-500">{}</div>', card['subtitle'])
                if card.get('subtitle') else EMPTY,
            )
            for card in cards
        ),
    )
    return format_html('<div class="grid grid-cols-2 md:grid-cols-6 gap-4">{}</div>', items)


def render_todays_schedule(appointments: list[dict[str, Any]], patients: dict[str, dict[str, Any]]) -> SafeString:
    if not appointments:
        return _empty('No appointments scheduled for today')
    return format_html_join(
        '',
        '<div class="flex items-center justify-between p-3 bg-gray-50 rounded-lg">'
        '<div><div class="font-medium">{} - {}</div>'
        '<div class="text-sm text-gray-600">{} &bull; {}</div></div>{}</div>',
        (
            (
                format_time(apt.get('appointment_date')),
                _name_for(apt, patients),
                _or(apt.get('appointment_type'), ''),
                apt.get('doctor_name') or 'Dr. TBD',
                _badge(apt.get('status'), get_status_color(apt.get('status'))),
            )
            for apt in appointments
        ),
    )


def render_critical_alerts(alerts: list[dict[str, str]]) -> SafeString:
    if not alerts:
        return _empty('No critical alerts at this time')
    return format_html_join(
        '',
        '<div class="flex items-center p-3 bg-red-50 border-l-4 border-red-400 rounded" data-alert="{}">'
        '<i class="fas {} text-red-600 mr-3"></i>'
        '<span class="text-sm text-red-800">{}</span></div>',
        ((alert['type'], alert['icon'], alert['message']) for alert in alerts),
    )


def render_dashboard_section(cards, todays, patients, alerts) -> SafeString:
    return format_html(
        '<section id="dashboard">{}'
        '<div class="grid grid-cols-1 lg:grid-cols-2 gap-6 mt-6">'
        '<div class="bg-white rounded-lg shadow p-6"><h3 class="text-lg font-semibold mb-4">Today\'s Schedule</h3>'
        '<div id="todaysSchedule" class="space-y-3">{}</div></div>'
        '<div class="bg-white rounded-lg shadow p-6"><h3 class="text-lg font-semibold mb-4">Critical Alerts</h3>'
        '<div id="criticalAlerts" class="space-y-3">{}</div></div>'
        '</div></section>',
        render_stats(cards),
        render_todays_schedule(todays, patients),
        render_critical_alerts(alerts),
    )


# ---------------------------------------------------------------------------
# Patients
# ---------------------------------------------------------------------------

def render_patient_row(patient: dict[str, Any], appointments: list[dict[str, Any]], csrf_token: str = '') -> SafeString:
    pid = patient.get('id')
    last_visit = kpis.last_completed_visit(appointments, pid)
    age = kpis.calculate_age(patient.get('date_of_birth'))
    actions = _join([
        _link(_url('patient-ehr', pid), 'EHR', 'fa-file-medical', 'text-medical-blue'),
        _link(_url('modal', 'patientForm', record_id=pid), 'Edit', 'fa-edit', 'text-medical-green'),
        _link(_url('modal', 'appointmentForm', patient_id=pid), 'Schedule', 'fa-calendar-plus', 'text-purple-600'),
        _link(_url('disease-history', pid), 'History', 'fa-clipboard-list', 'text-gray-700'),
        _post_button(_url('patient-delete', pid), 'Delete', csrf_token, DELETE_PATIENT_CONFIRM),
    ])
    return format_html(
        '<tr class="hover:bg-gray-50" data-patient-id="{}">'
        '<td class="px-6 py-4"><div class="text-sm font-medium text-gray-900">{}</div>'
        '<div class="text-sm text-gray-500">{}</div></td>'
        '<td class="px-6 py-4"><div class="text-sm text-gray-900">{}</div>'
        '<div class="text-sm text-gray-500">{}</div></td>'
        '<td class="px-6 py-4"><span class="inline-flex px-2 py-1 text-xs font-semibold rounded-full bg-red-100 text-red-800">{}</span></td>'
        '<td class="px-6 py-4 text-sm text-gray-900">{} years</td>'
        '<td class="px-6 py-4 text-sm text-gray-900">{}</td>'
        '<td class="px-6 py-4 text-sm font-medium space-x-2">{}</td>'
        '</tr>',
        pid,
        kpis.patient_name(patient),
        _or(patient.get('gender'), ''),
        _or(patient.get('phone')),
        _or(patient.get('email')),
        patient.get('blood_type') or 'Unknown',
        age,
        format_day(last_visit.get('appointment_date')) if last_visit else 'No visits',
        actions,
    )


def render_patients_table(patients: list[dict[str, Any]], appointments: list[dict[str, Any]], csrf_token: str = '') -> SafeString:
    if not patients:
        return format_html(
            '<div class="text-center py-8"><i class="fas fa-user-md text-gray-400 text-4xl mb-4"></i>'
            '<p class="text-gray-600">{}</p></div>',
            'No patients found. Click "Add Patient" to get started.',
        )
    header = format_html_join(
        '',
        '<th class="px-6 py-3 text-left text-xs font-medium text-gray-500 uppercase">{}</th>',
        ((h,) for h in ('Patient', 'Contact', 'Blood Type', 'Age', 'Last Visit', 'Actions')),
    )
    rows = _join(render_patient_row(p, appointments, csrf_token) for p in patients)
    return format_html(
        '<div class="overflow-x-auto"><table class="min-w-full divide-y divide-gray-200">'
        '<thead class="bg-gray-50"><tr>{}</tr></thead>'
        '<tbody class="bg-white divide-y divide-gray-200">{}</tbody></table></div>',
        header,
        rows,
    )


def render_patients_section(patients, appointments, query: str = '', csrf_token: str = '') -> SafeString:
    matches = kpis.search_patients(patients, query)
    return format_html(
        '<section id="patients">'
        '<div class="flex justify-between items-center mb-4">'
        '<form method="get" action="{}" class="flex space-x-2">'
        '<input type="search" name="q" id="searchInput" value="{}" placeholder="Search patients...">'
        '<button type="submit">Search</button><a href="{}">Clear</a></form>'
        '<a href="{}" class="bg-medical-green text-white px-4 py-2 rounded">'
        '<i class="fas fa-user-plus mr-2"></i>Add Patient</a></div>'
        '<div id="patientsContainer">{}</div></section>',
        _url('patient-search'),
        query,
        _url('patient-search', q=''),
        _url('modal', 'patientForm'),
        render_patients_table(matches, appointments, csrf_token),
    )


# ---------------------------------------------------------------------------
# EHR
# ---------------------------------------------------------------------------

def render_ehr_tabs(active: str) -> SafeString:
    return format_html(
        '<div class="border-b flex space-x-6">{}</div>',
        format_html_join(
            '',
            '<a href="{}" class="ehr-tab {}" data-tab="{}">{}</a>',
            (
                (
                    _url('ehr-tab', tab),
                    'border-medical-blue text-medical-blue' if tab == active else 'border-transparent text-gray-500',
                    tab,
                    EHR_TAB_LABELS[tab],
                )
                for tab in EHR_TABS
            ),
        ),
    )


def render_current_medications(medications: list[dict[str, Any]]) -> SafeString:
    if not medications:
        return _empty('No current medications')
    return format_html(
        '<div class="space-y-2 max-h-40 overflow-y-auto">{}</div>',
        format_html_join(
            '',
            '<div class="flex justify-between items-center p-2 bg-white rounded border">'
            '<div><div class="font-medium text-sm">{}</div><div class="text-xs text-gray-500">{} &bull; {}</div></div>'
            '<div class="text-right"><div class="text-xs {}">{}</div>'
            '<div class="text-xs text-gray-500">{} refills</div></div></div>',
            (
                (
                    med.get('medication_name'),
                    _or(med.get('dosage'), ''),
                    _or(med.get('frequency'), ''),
                    get_adherence_color(med.get('adherence_level')),
                    med.get('adherence_level') or c.ADHERENCE_UNKNOWN,
                    med.get('refills_remaining') or 0,
                )
                for med in medications
            ),
        ),
    )


def _render_recent_vitals(vitals: dict[str, Any] | None) -> SafeString:
    if not vitals:
        return _empty('No vital signs recorded')
    return format_html(
        '<div class="space-y-3 text-sm">{}<div class="text-xs text-gray-500 mt-2">Recorded: {}</div></div>',
        _rows([
            ('Blood Pressure', f"{_or(vitals.get('blood_pressure_systolic'))}/{_or(vitals.get('blood_pressure_diastolic'))} mmHg"),
            ('Heart Rate', f"{_or(vitals.get('heart_rate'))} BPM"),
            ('Temperature', f"{_or(vitals.get('temperature'))}°F"),
            ('Weight', f"{_or(vitals.get('weight'))} lbs"),
            ('BMI', _or(vitals.get('bmi'))),
        ]),
        format_day(vitals.get('recorded_date')),
    )


def render_ehr_overview(ehr: dict[str, Any], csrf_token: str = '') -> SafeString:
    patient = ehr['patient']
    pid = patient.get('id')
    personal = _rows([
        ('Name', ehr['name']),
        ('Date of Birth', format_day(patient.get('date_of_birth'))),
        ('Age', f"{ehr['age']} years"),
        ('Gender', _or(patient.get('gender'))),
        ('Blood Type', patient.get('blood_type') or 'Unknown'),
        ('Phone', _or(patient.get('phone'))),
        ('Email', _or(patient.get('email'))),
        ('Allergies', patient.get('allergies') or 'None reported'),
    ])
    if ehr['active_conditions']:
        conditions = format_html(
            '<div class="space-y-2">{}</div>',
            format_html_join(
                '',
                '<div class="flex justify-between items-center p-2 bg-white rounded border">'
                '<div><div class="font-medium text-sm">{}</div><div class="text-xs text-gray-500">{} &bull; {}</div></div>{}</div>',
                (
                    (
                        d.get('disease_name'),
                        d.get('status'),
                        _or(d.get('severity')),
                        _badge(d.get('status'), get_status_color(d.get('status'))),
                    )
                    for d in ehr['active_conditions']
                ),
            ),
        )
    else:
        conditions = _empty('No active conditions')

    return format_html(
        '<div class="grid grid-cols-1 lg:grid-cols-2 gap-6">'
        '<div class="bg-gray-50 rounded-lg p-6"><h4 class="text-lg font-semibold mb-4">Personal Information</h4>'
        '<div class="space-y-3 text-sm">{}</div></div>'
        '<div class="bg-gray-50 rounded-lg p-6"><h4 class="text-lg font-semibold mb-4">Recent Vitals</h4>{}{}</div>'
        '<div class="bg-gray-50 rounded-lg p-6"><div class="flex justify-between items-center mb-4">'
        '<h4 class="text-lg font-semibold">Active Conditions</h4>{}</div>{}</div>'
        '<div class="bg-gray-50 rounded-lg p-6"><div class="flex justify-between items-center mb-4">'
        '<h4 class="text-lg font-semibold">Current Medications</h4>{}</div>{}</div>'
        '</div>'
        '<div class="mt-6 flex justify-end space-x-3">{}{}{}</div>',
        personal,
        _render_recent_vitals(ehr['latest_vitals']),
        _link(_url('modal', 'vitalsForm', patient_id=pid), 'Record Vitals', 'fa-plus', 'bg-medical-red text-white px-4 py-2 rounded text-sm'),
        _link(_url('modal', 'diseaseForm', patient_id=pid), 'Add', 'fa-plus', 'bg-medical-green text-white px-3 py-1 rounded text-sm'),
        conditions,
        _link(_url('modal', 'medicationForm', patient_id=pid), 'Add', 'fa-plus', 'bg-medical-purple text-white px-3 py-1 rounded text-sm'),
        render_current_medications(ehr['current_medications']),
        _link(_url('modal', 'patientForm', record_id=pid), 'Edit Patient', 'fa-edit', 'bg-medical-blue text-white px-4 py-2 rounded'),
        _link(_url('modal', 'appointmentForm', patient_id=pid), 'Schedule Appointment', 'fa-calendar-plus', 'bg-medical-green text-white px-4 py-2 rounded'),
        _link(_url('disease-history', pid), 'View Full History', 'fa-clipboard-list', 'bg-purple-600 text-white px-4 py-2 rounded'),
    )


def _table(headers, rows) -> SafeString:
    return format_html(
        '<div class="overflow-x-auto"><table class="min-w-full divide-y divide-gray-200">'
        '<thead class="bg-gray-50"><tr>{}</tr></thead>'
        '<tbody class="bg-white divide-y divide-gray-200">{}</tbody></table></div>',
        format_html_join('', '<th class="px-4 py-3 text-left text-xs font-medium text-gray-500 uppercase">{}</th>', ((h,) for h in headers)),
        format_html_join('', '<tr>{}</tr>', ((format_html_join('', '<td class="px-4 py-3 text-sm">{}</td>', ((cell,) for cell in row)),) for row in rows)),
    )


def _tab_header(title: str, action: SafeString = EMPTY) -> SafeString:
    return format_html(
        '<div class="flex justify-between items-center mb-6"><h4 class="text-lg font-semibold text-gray-800">{}</h4>{}</div>',
        title,
        action,
    )


def _delete(table: str, record: dict[str, Any], csrf_token: str) -> SafeString:
    return _post_button(_url('record-delete', table, record.get('id')), '', csrf_token, DELETE_RECORD_CONFIRM)


def render_ehr_vitals(ehr: dict[str, Any], csrf_token: str = '') -> SafeString:
    pid = ehr['patient'].get('id')
    header = _tab_header(
        'Vital Signs History',
        _link(_url('modal', 'vitalsForm', patient_id=pid), 'Record New Vitals', 'fa-plus', 'bg-medical-red text-white px-4 py-2 rounded'),
    )
    if not ehr['vitals']:
        return header + _empty('No vital signs recorded for this patient.', centered=True)
    rows = [
        (
            format_day(v.get('recorded_date')),
            f"{_or(v.get('blood_pressure_systolic'), '-')}/{_or(v.get('blood_pressure_diastolic'), '-')}",
            _or(v.get('heart_rate'), '-'),
            f"{_or(v.get('temperature'), '-')}°F",
            f"{_or(v.get('weight'), '-')} lbs",
            _or(v.get('bmi'), '-'),
            f"{_or(v.get('oxygen_saturation'), '-')}%",
            _delete(c.VITALS, v, csrf_token),
        )
        for v in ehr['vitals']
    ]
    return header + _table(('Date', 'BP', 'HR', 'Temp', 'Weight', 'BMI', 'O2 Sat', 'Actions'), rows)


def render_ehr_medications(ehr: dict[str, Any], csrf_token: str = '') -> SafeString:
    pid = ehr['patient'].get('id')
    header = _tab_header(
        'Medications',
        _link(_url('modal', 'medicationForm', patient_id=pid), 'Add Medication', 'fa-plus', 'bg-medical-purple text-white px-4 py-2 rounded'),
    )
    if not ehr['medications']:
        return header + _empty('No medications recorded for this patient.', centered=True)
    rows = [
        (
            m.get('medication_name'),
            _or(m.get('dosage'), '-'),
            _or(m.get('frequency'), '-'),
            _badge(m.get('status'), get_status_color(m.get('status'))),
            format_html('<span class="{}">{}</span>', get_adherence_color(m.get('adherence_level')),
                        m.get('adherence_level') or c.ADHERENCE_UNKNOWN),
            m.get('refills_remaining') or 0,
            _delete(c.MEDICATIONS, m, csrf_token),
        )
        for m in ehr['medications']
    ]
    return header + _table(('Medication', 'Dosage', 'Frequency', 'Status', 'Adherence', 'Refills', 'Actions'), rows)


def render_ehr_lab_results(ehr: dict[str, Any], csrf_token: str = '') -> SafeString:
    pid = ehr['patient'].get('id')
    header = _tab_header(
        'Lab Results',
        _link(_url('modal', 'labResultForm', patient_id=pid), 'Add Lab Result', 'fa-plus', 'bg-medical-blue text-white px-4 py-2 rounded'),
    )
    if not ehr['lab_results']:
        return header + _empty('No lab results recorded for this patient.', centered=True)
    rows = [
        (
            lab.get('test_name'),
            format_day(lab.get('test_date')),
            f"{_or(lab.get('result_value'), '-')} {lab.get('unit') or ''}".strip(),
            _or(lab.get('reference_range'), '-'),
            _badge(lab.get('status'), get_lab_status_color(lab.get('status'))),
            _delete(c.LAB_RESULTS, lab, csrf_token),
        )
        for lab in ehr['lab_results']
    ]
    return header + _table(('Test', 'Date', 'Result', 'Reference', 'Status', 'Actions'), rows)


def render_ehr_appointments(ehr: dict[str, Any], csrf_token: str = '') -> SafeString:
    pid = ehr['patient'].get('id')
    header = _tab_header(
        'Appointments',
        _link(_url('modal', 'appointmentForm', patient_id=pid), 'Schedule Appointment', 'fa-calendar-plus', 'bg-medical-green text-white px-4 py-2 rounded'),
    )
    if not ehr['appointments']:
        return header + _empty('No appointments for this patient.', centered=True)
    rows = [
        (
            format_day(apt.get('appointment_date')),
            format_time(apt.get('appointment_date')),
            _or(apt.get('appointment_type'), '-'),
            apt.get('doctor_name') or 'Dr. TBD',
            _or(apt.get('chief_complaint'), '-'),
            _badge(apt.get('status'), get_status_color(apt.get('status'))),
            _delete(c.APPOINTMENTS, apt, csrf_token),
        )
        for apt in ehr['appointments']
    ]
    return header + _table(('Date', 'Time', 'Type', 'Doctor', 'Complaint', 'Status', 'Actions'), rows)


def render_ehr_notes(ehr: dict[str, Any], csrf_token: str = '') -> SafeString:
    header = _tab_header('Clinical Notes')
    if not ehr['soap_notes']:
        return header + _empty('No clinical notes recorded for this patient.', centered=True)
    notes = format_html_join(
        '',
        '<div class="border rounded-lg p-4"><div class="flex justify-between mb-2">'
        '<span class="font-semibold">{}</span><span class="text-sm text-gray-500">{}</span></div>'
        '<div class="grid grid-cols-1 md:grid-cols-2 gap-3 text-sm">{}</div></div>',
        (
            (
                format_day(note.get('visit_date')),
                _or(note.get('provider_name'), ''),
                format_html_join(
                    '',
                    '<div><span class="font-medium">{}:</span> {}</div>',
                    (
                        (label, _or(note.get(field), '-'))
                        for label, field in (
                            ('Subjective', 'subjective'),
                            ('Objective', 'objective'),
                            ('Assessment', 'assessment'),
                            ('Plan', 'plan'),
                        )
                    ),
                ),
            )
            for note in ehr['soap_notes']
        ),
    )
    return header + format_html('<div class="space-y-4">{}</div>', notes)


EHR_TAB_RENDERERS = {
    'overview': render_ehr_overview,
    'vitals': render_ehr_vitals,
    'medications': render_ehr_medications,
    'lab-results': render_ehr_lab_results,
    'appointments': render_ehr_appointments,
    'notes': render_ehr_notes,
}


def render_ehr_tab(tab: str, ehr: dict[str, Any], csrf_token: str = '') -> SafeString:
    try:
        renderer = EHR_TAB_RENDERERS[tab]
    except KeyError:
        raise ValueError(f'Unknown EHR tab: {tab}') from None
    return renderer(ehr, csrf_token)


def render_patient_details(ehr: dict[str, Any], tab: str, csrf_token: str = '') -> SafeString:
    return format_html(
        '<div class="mb-4"><h3 class="text-xl font-semibold">{}</h3></div>{}'
        '<div id="patientDetailsContent" class="mt-6">{}</div>',
        ehr['name'],
        render_ehr_tabs(tab),
        render_ehr_tab(tab, ehr, csrf_token),
    )


# ---------------------------------------------------------------------------
# Disease history
# ---------------------------------------------------------------------------

def render_disease_record(disease: dict[str, Any], csrf_token: str = '') -> SafeString:
    details = format_html_join(
        '',
        '<div><span class="font-medium">{}:</span> {}</div>',
        (
            (label, value)
            for label, value in (
                ('Symptoms', disease.get('symptoms')),
                ('Treatment', disease.get('treatment')),
                ('Medication', disease.get('medication')),
                ('Doctor', disease.get('doctor_name')),
                ('Follow-up', format_day(disease.get('follow_up_date'), default='')),
            )
            if value
        ),
    )
    severity = disease.get('severity')
    notes = disease.get('notes')
    return format_html(
        '<div class="border rounded-lg p-4" data-disease-id="{}">'
        '<div class="flex justify-between items-start mb-3"><div>'
        '<h5 class="font-semibold text-lg text-gray-800">{}</h5>'
        '<div class="flex items-center space-x-4 text-sm text-gray-600 mt-1"><span>{}</span>{}{}</div></div>'
        '<div class="flex space-x-2">{}{}</div></div>'
        '<div class="grid grid-cols-1 md:grid-cols-2 gap-4 text-sm">{}</div>{}</div>',
        disease.get('id'),
        disease.get('disease_name'),
        format_day(disease.get('diagnosis_date'), default='No date'),
        _badge(disease.get('status'), get_status_color(disease.get('status'))),
        _badge(severity, get_severity_color(severity)) if severity else EMPTY,
        _link(_url('modal', 'diseaseForm', patient_id=disease.get('patient_id'), record_id=disease.get('id')),
              '', 'fa-edit', 'text-medical-blue'),
        _post_button(_url('record-delete', c.DISEASE_HISTORY, disease.get('id')), '', csrf_token, DELETE_DISEASE_CONFIRM),
        details,
        format_html('<div class="mt-3 text-sm"><span class="font-medium">Notes:</span> {}</div>', notes) if notes else EMPTY,
    )


def render_disease_history(patient: dict[str, Any], records: list[dict[str, Any]], csrf_token: str = '') -> SafeString:
    header = format_html(
        '<div class="flex justify-between items-center mb-4">'
        '<h4 class="text-lg font-semibold text-gray-800">Disease History for {}</h4>{}</div>',
        kpis.patient_name(patient),
        _link(_url('modal', 'diseaseForm', patient_id=patient.get('id')), 'Add Disease History', 'fa-plus',
              'bg-medical-green text-white px-4 py-2 rounded'),
    )
    if not records:
        return header + _empty('No disease history recorded for this patient.', centered=True)
    return header + format_html(
        '<div class="space-y-4">{}</div>',
        _join(render_disease_record(d, csrf_token) for d in records),
    )


# ---------------------------------------------------------------------------
# Appointments, labs, messages
# ---------------------------------------------------------------------------

def _options(choices, selected='', blank: str | None = None) -> SafeString:
    options = [(value, label) for value, label in choices]
    if blank is not None:
        options.insert(0, ('', blank))
    return format_html_join(
        '',
        '<option value="{}"{}>{}</option>',
        (
            (value, mark_safe(' selected') if str(value) == str(selected or '') else '', label)
            for value, label in options
        ),
    )


def render_appointments_section(
    appointments: list[dict[str, Any]],
    patients: dict[str, dict[str, Any]],
    status: str = '',
    on_date: str = '',
    csrf_token: str = '',
) -> SafeString:
    """Appointment list, already filtered, with the filter form."""
    filters = format_html(
        '<form method="get" action="{}" class="flex space-x-2 mb-4">'
        '<select name="status">{}</select><input type="date" name="date" value="{}">'
        '<button type="submit">Filter</button><a href="{}">Reset</a></form>',
        _url('appointment-filter'),
        _options(((s, s) for s in c.APPOINTMENT_STATUS_CHOICES), status, blank='All statuses'),
        on_date,
        _url('appointment-filter'),
    )
    action = _link(_url('modal', 'appointmentForm'), 'Schedule Appointment', 'fa-calendar-plus',
                   'bg-medical-green text-white px-4 py-2 rounded')
    if not appointments:
        body = _empty('No appointments found.', centered=True)
    else:
        body = _table(
            ('Patient', 'Date', 'Time', 'Type', 'Doctor', 'Status', 'Actions'),
            [
                (
                    _name_for(apt, patients),
                    format_day(apt.get('appointment_date')),
                    format_time(apt.get('appointment_date')),
                    _or(apt.get('appointment_type'), '-'),
                    apt.get('doctor_name') or 'Dr. TBD',
                    _badge(apt.get('status'), get_status_color(apt.get('status'))),
                    _delete(c.APPOINTMENTS, apt, csrf_token),
                )
                for apt in appointments
            ],
        )
    return format_html('<section id="appointments">{}{}{}</section>', action, filters, body)


def render_lab_results_section(lab_results, patients, csrf_token: str = '') -> SafeString:
    action = _link(_url('modal', 'labResultForm'), 'Add Lab Result', 'fa-flask',
                   'bg-medical-blue text-white px-4 py-2 rounded')
    if not lab_results:
        body = _empty('No lab results recorded.', centered=True)
    else:
        body = _table(
            ('Patient', 'Test', 'Date', 'Result', 'Reference', 'Status', 'Actions'),
            [
                (
                    _name_for(lab, patients),
                    lab.get('test_name'),
                    format_day(lab.get('test_date')),
                    f"{_or(lab.get('result_value'), '-')} {lab.get('unit') or ''}".strip(),
                    _or(lab.get('reference_range'), '-'),
                    _badge(lab.get('status'), get_lab_status_color(lab.get('status'))),
                    _delete(c.LAB_RESULTS, lab, csrf_token),
                )
                for lab in lab_results
            ],
        )
    return format_html('<section id="labResults">{}{}</section>', action, body)


def render_messages_section(messages, patients, csrf_token: str = '') -> SafeString:
    action = _link(_url('modal', 'messageForm'), 'New Message', 'fa-envelope',
                   'bg-medical-blue text-white px-4 py-2 rounded')
    if not messages:
        body = _empty('No messages.', centered=True)
    else:
        body = format_html_join(
            '',
            '<div class="border rounded-lg p-4 {}"><div class="flex justify-between">'
            '<span class="font-semibold">{}</span><span class="text-xs text-gray-500">{} &bull; {}</span></div>'
            '<div class="text-sm text-gray-600">{} &rarr; {} &bull; {}</div>'
            '<p class="text-sm mt-2">{}</p>{}</div>',
            (
                (
                    'bg-blue-50' if m.get('status') == c.MESSAGE_UNREAD else '',
                    m.get('subject'),
                    _or(m.get('priority'), 'Normal'),
                    format_day(m.get('sent_date')),
                    _or(m.get('sender'), '-'),
                    _or(m.get('recipient'), '-'),
                    _name_for(m, patients),
                    _or(m.get('content'), ''),
                    _delete(c.MESSAGES, m, csrf_token),
                )
                for m in messages
            ),
        )
    return format_html('<section id="messages">{}<div class="space-y-3 mt-4">{}</div></section>', action, body)


def render_analytics_section(charts: dict[str, Any]) -> SafeString:
    """Chart containers plus their data as ``json_script`` blocks."""
    return format_html(
        '<section id="analytics"><div class="grid grid-cols-1 lg:grid-cols-2 gap-6">{}</div></section>',
        format_html_join(
            '',
            '<div class="bg-white rounded-lg shadow p-6"><canvas id="{}Chart"></canvas>{}</div>',
            ((name, json_script(data, f'{name}-data')) for name, data in charts.items()),
        ),
    )


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

def _choices(values):
    return tuple((v, v) for v in values)


# modal -> form name, titles and fields (name, label, input type, choices)
FORM_SPECS: dict[str, dict[str, Any]] = {
    'patientForm': {
        'form': 'patient',
        'title': 'Add New Patient',
        'edit_title': 'Edit Patient',
        'fields': [
            ('first_name', 'First Name', 'text', None),
            ('last_name', 'Last Name', 'text', None),
            ('date_of_birth', 'Date of Birth', 'date', None),
            ('gender', 'Gender', 'select', _choices(c.GENDER_CHOICES)),
            ('phone', 'Phone', 'tel', None),
            ('email', 'Email', 'email', None),
            ('address', 'Address', 'textarea', None),
            ('blood_type', 'Blood Type', 'select', _choices(c.BLOOD_TYPE_CHOICES)),
            ('emergency_contact', 'Emergency Contact', 'text', None),
            ('insurance_info', 'Insurance Information', 'text', None),
            ('allergies', 'Allergies', 'textarea', None),
            ('notes', 'Notes', 'textarea', None),
        ],
    },
    'diseaseForm': {
        'form': 'disease',
        'title': 'Add Disease History',
        'edit_title': 'Edit Disease History',
        'fields': [
            ('disease_name', 'Disease/Condition', 'text', None),
            ('diagnosis_date', 'Diagnosis Date', 'date', None),
            ('status', 'Status', 'select', _choices(c.DISEASE_STATUS_CHOICES)),
            ('severity', 'Severity', 'select', _choices(c.SEVERITY_CHOICES)),
            ('symptoms', 'Symptoms', 'textarea', None),
            ('treatment', 'Treatment', 'textarea', None),
            ('medication', 'Medication', 'text', None),
            ('doctor_name', 'Doctor', 'text', None),
            ('follow_up_date', 'Follow-up Date', 'date', None),
            ('notes', 'Notes', 'textarea', None),
        ],
    },
    'appointmentForm': {
        'form': 'appointment',
        'title': 'Schedule Appointment',
        'fields': [
            ('appointment_date', 'Date', 'date', None),
            ('appointment_time', 'Time', 'time', None),
            ('duration', 'Duration (minutes)', 'number', None),
            ('appointment_type', 'Appointment Type', 'select', _choices(c.APPOINTMENT_TYPE_CHOICES)),
            ('doctor_name', 'Doctor', 'text', None),
            ('chief_complaint', 'Chief Complaint', 'textarea', None),
            ('notes', 'Notes', 'textarea', None),
        ],
    },
    'vitalsForm': {
        'form': 'vitals',
        'title': 'Record Vital Signs',
        'fields': [
            ('blood_pressure_systolic', 'Systolic BP', 'number', None),
            ('blood_pressure_diastolic', 'Diastolic BP', 'number', None),
            ('heart_rate', 'Heart Rate (BPM)', 'number', None),
            ('temperature', 'Temperature (°F)', 'number', None),
            ('weight', 'Weight (lbs)', 'number', None),
            ('height', 'Height (inches)', 'number', None),
            ('respiratory_rate', 'Respiratory Rate', 'number', None),
            ('oxygen_saturation', 'Oxygen Saturation (%)', 'number', None),
            ('blood_sugar', 'Blood Sugar (mg/dL)', 'number', None),
            ('pain_level', 'Pain Level (0-10)', 'number', None),
            ('recorded_by', 'Recorded By', 'text', None),
            ('notes', 'Notes', 'textarea', None),
        ],
    },
    'medicationForm': {
        'form': 'medication',
        'title': 'Add Medication',
        'fields': [
            ('medication_name', 'Medication', 'text', None),
            ('dosage', 'Dosage', 'text', None),
            ('frequency', 'Frequency', 'text', None),
            ('status', 'Status', 'select', _choices(c.MEDICATION_STATUS_CHOICES)),
            ('adherence_level', 'Adherence', 'select', _choices(c.ADHERENCE_CHOICES)),
            ('refills_remaining', 'Refills Remaining', 'number', None),
            ('start_date', 'Start Date', 'date', None),
            ('prescribing_doctor', 'Prescribing Doctor', 'text', None),
            ('notes', 'Notes', 'textarea', None),
        ],
    },
    'labResultForm': {
        'form': 'lab_result',
        'title': 'Add Lab Result',
        'fields': [
            ('test_name', 'Test Name', 'text', None),
            ('test_date', 'Test Date', 'date', None),
            ('result_value', 'Result', 'text', None),
            ('unit', 'Unit', 'text', None),
            ('reference_range', 'Reference Range', 'text', None),
            ('status', 'Status', 'select', _choices(c.LAB_STATUS_CHOICES)),
            ('ordered_by', 'Ordered By', 'text', None),
            ('notes', 'Notes', 'textarea', None),
        ],
    },
    'messageForm': {
        'form': 'message',
        'title': 'New Message',
        'fields': [
            ('subject', 'Subject', 'text', None),
            ('content', 'Message', 'textarea', None),
            ('sender', 'From', 'text', None),
            ('recipient', 'To', 'text', None),
            ('priority', 'Priority', 'select', _choices(c.MESSAGE_PRIORITY_CHOICES)),
        ],
    },
}


def _initial_value(kind: str, value) -> str:
    if value in (None, ''):
        return ''
    if kind == 'date':
        day = kpis.parse_day(value)
        return day.isoformat() if day else ''
    return str(value)


def _render_field(name: str, label: str, kind: str, choices, value) -> SafeString:
    value = _initial_value(kind, value)
    if kind == 'select':
        control = format_html('<select name="{}" id="id_{}">{}</select>', name, name, _options(choices, value, blank=''))
    elif kind == 'textarea':
        control = format_html('<textarea name="{}" id="id_{}" rows="2">{}</textarea>', name, name, value)
    else:
        step = mark_safe(' step="any"') if kind == 'number' else EMPTY
        control = format_html('<input type="{}" name="{}" id="id_{}" value="{}"{}>', kind, name, name, value, step)
    return format_html('<div class="form-field"><label for="id_{}">{}</label>{}</div>', name, label, control)


def render_form(
    modal: str,
    csrf_token: str = '',
    initial: dict[str, Any] | None = None,
    patients: list[dict[str, Any]] = (),
    patient_id: str | None = None,
    editing: bool = False,
) -> SafeString:
    """Entry form of a form modal; ``initial`` pre-fills it when editing."""
    try:
        spec = FORM_SPECS[modal]
    except KeyError:
        raise ValueError(f'Unknown form modal: {modal}') from None
    initial = initial or {}

    if spec['form'] == 'patient':
        patient_field = EMPTY
    elif patient_id:
        patient_field = format_html('<input type="hidden" name="patient_id" value="{}">', patient_id)
    else:
        patient_field = format_html(
            '<div class="form-field"><label for="id_patient_id">Patient</label>'
            '<select name="patient_id" id="id_patient_id">{}</select></div>',
            _options(((p.get('id'), kpis.patient_name(p)) for p in patients), initial.get('patient_id'),
                     blank='Select Patient'),
        )

    defaults = {'duration': c.DEFAULT_APPOINTMENT_DURATION} if spec['form'] == 'appointment' else {}
    fields = _join(
        _render_field(name, label, kind, choices, initial.get(name, defaults.get(name)))
        for name, label, kind, choices in spec['fields']
    )
    title = spec.get('edit_title', spec['title']) if editing else spec['title']
    return format_html(
        '<div class="modal" id="{}"><div class="flex justify-between items-center mb-4">'
        '<h3 class="text-lg font-semibold">{}</h3><a href="{}" class="text-gray-500">&times;</a></div>'
        '<form method="post" action="{}" class="space-y-3">{}{}{}'
        '<div class="flex justify-end space-x-3"><a href="{}">Cancel</a>'
        '<button type="submit" class="bg-medical-blue text-white px-4 py-2 rounded">Save</button></div>'
        '</form></div>',
        modal,
        title,
        _url('modal-close', modal),
        _url(f"form-{spec['form']}"),
        _csrf_input(csrf_token),
        patient_field,
        fields,
        _url('modal-close', modal),
    )


def render_modal_shell(modal: str, body: SafeString) -> SafeString:
    return format_html(
        '<div class="modal-backdrop"><div class="modal" id="{}">'
        '<div class="flex justify-end"><a href="{}" class="text-gray-500">&times;</a></div>{}</div></div>',
        modal,
        _url('modal-close', modal),
        body,
    )
