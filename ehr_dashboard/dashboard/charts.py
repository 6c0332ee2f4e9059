"""
Chart data for the analytics section
Produces Chart.js-shaped JSON; nothing is drawn server-side.
"""
from datetime import datetime, timedelta
from typing import Any

from django.utils import timezone

from ehr_dashboard.records import constants as c

from . import kpis


GENDER_COLORS = ['#0284c7', '#059669', '#dc2626', '#7c3aed']
ADHERENCE_CHART_COLORS = ['#059669', '#0284c7', '#eab308', '#dc2626', '#64748b']


def get_gender_distribution(patients: list[dict]) -> dict[str, Any]:
    """Doughnut chart: patients per gender."""
    counts = kpis.count_by(patients, 'gender')
    return {
        'labels': list(counts),
        'datasets': [{
            'data': list(counts.values()),
            'backgroundColor': GENDER_COLORS,
        }]
    }


def get_top_conditions(disease_history: list[dict], limit: int = 10) -> dict[str, Any]:
    """Bar chart: most frequent diagnoses."""
    counts = kpis.count_by(disease_history, 'disease_name')
    # sorted() is stable, so ties keep first-seen order
    top = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    return {
        'labels': [name for name, _ in top],
        'datasets': [{
            'label': 'Number of Cases',
            'data': [count for _, count in top],
            'backgroundColor': '#059669',
        }]
    }


def get_adherence_distribution(medications: list[dict]) -> dict[str, Any]:
    """Pie chart: medications per adherence level."""
    counts = kpis.count_by(medications, 'adherence_level', default=c.ADHERENCE_UNKNOWN)
    return {
        'labels': list(counts),
        'datasets': [{
            'data': list(counts.values()),
            'backgroundColor': ADHERENCE_CHART_COLORS,
        }]
    }


def get_appointments_per_day(appointments: list[dict], days: int = 30, now: datetime = None) -> dict[str, Any]:
    """Line chart: appointments per day (last X days)."""
    today = timezone.localtime(now or timezone.now()).date()
    start = today - timedelta(days=days - 1)

    daily_counts: dict = {}
    for appointment in appointments:
        day = kpis.parse_day(appointment.get('appointment_date'))
        if day is not None and start <= day <= today:
            daily_counts[day] = daily_counts.get(day, 0) + 1

    # Fill every day, including days without appointments
    labels = []
    data = []
    current = start
    while current <= today:
        labels.append(current.strftime('%m/%d'))
        data.append(daily_counts.get(current, 0))
        current += timedelta(days=1)

    return {
        'labels': labels,
        'datasets': [{
            'label': 'Appointments',
            'data': data,
            'borderColor': '#0284c7',
            'backgroundColor': 'rgba(2, 132, 199, 0.1)',
            'fill': True,
            'tension': 0.4,
        }]
    }


def get_all_charts(cache, now: datetime = None) -> dict[str, Any]:
    return {
        'demographics': get_gender_distribution(cache.patients),
        'conditions': get_top_conditions(cache.disease_history),
        'adherence': get_adherence_distribution(cache.medications),
        'appointment_trend': get_appointments_per_day(cache.appointments, now=now),
    }
