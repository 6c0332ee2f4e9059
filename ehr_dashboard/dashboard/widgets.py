"""
Widget definitions and colour mapping for the EHR dashboard
"""
from dataclasses import dataclass
from typing import Any, Optional

from ehr_dashboard.records import constants as c

from . import kpis


NEUTRAL_BADGE = 'bg-gray-100 text-gray-800'
NEUTRAL_TEXT = 'text-gray-600'

# Disease and appointment statuses share one palette
STATUS_COLORS = {
    'Active': 'bg-red-100 text-red-800',
    'Recovered': 'bg-green-100 text-green-800',
    'Chronic': 'bg-yellow-100 text-yellow-800',
    'Under Treatment': 'bg-blue-100 text-blue-800',
    'Remission': 'bg-purple-100 text-purple-800',
    'Scheduled': 'bg-blue-100 text-blue-800',
    'Confirmed': 'bg-green-100 text-green-800',
    'Completed': 'bg-gray-100 text-gray-800',
    'Cancelled': 'bg-red-100 text-red-800',
    'In Progress': 'bg-yellow-100 text-yellow-800',
    'No Show': 'bg-orange-100 text-orange-800',
}

SEVERITY_COLORS = {
    'Mild': 'bg-green-100 text-green-800',
    'Moderate': 'bg-yellow-100 text-yellow-800',
    'Severe': 'bg-orange-100 text-orange-800',
    'Critical': 'bg-red-100 text-red-800',
}

ADHERENCE_COLORS = {
    'Excellent': 'text-green-600',
    'Good': 'text-blue-600',
    'Fair': 'text-yellow-600',
    'Poor': 'text-red-600',
    'Unknown': 'text-gray-600',
}

LAB_STATUS_COLORS = {
    'Pending': 'bg-yellow-100 text-yellow-800',
    'Normal': 'bg-green-100 text-green-800',
    'Abnormal': 'bg-orange-100 text-orange-800',
    'Critical': 'bg-red-100 text-red-800',
}


def get_status_color(status) -> str:
    return STATUS_COLORS.get(status, NEUTRAL_BADGE) if isinstance(status, str) else NEUTRAL_BADGE


def get_severity_color(severity) -> str:
    return SEVERITY_COLORS.get(severity, NEUTRAL_BADGE) if isinstance(severity, str) else NEUTRAL_BADGE


def get_adherence_color(adherence) -> str:
    return ADHERENCE_COLORS.get(adherence, NEUTRAL_TEXT) if isinstance(adherence, str) else NEUTRAL_TEXT


def get_lab_status_color(status) -> str:
    return LAB_STATUS_COLORS.get(status, NEUTRAL_BADGE) if isinstance(status, str) else NEUTRAL_BADGE


@dataclass
class KPICard:
    """KPI card on the stats strip"""
    key: str
    title: str
    value: Any
    icon: str
    color: str
    subtitle: Optional[str] = None
    link: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'title': self.title,
            'value': self.value,
            'icon': self.icon,
            'color': self.color,
            'subtitle': self.subtitle,
            'link': self.link,
        }


@dataclass
class StatusBadge:
    """Status badge with a count"""
    label: str
    count: int
    color: str

    def to_dict(self) -> dict:
        return {
            'label': self.label,
            'count': self.count,
            'color': self.color,
        }


def build_kpi_cards(stats: dict) -> list[dict]:
    """KPI cards for the dashboard stats strip, in display order."""
    cards = [
        KPICard('total_patients', 'Total Patients', stats['total_patients'],
                'fa-users', 'text-medical-blue', link='patients'),
        KPICard('today_appointments', "Today's Appointments", stats['today_appointments'],
                'fa-calendar-day', 'text-medical-green', link='appointments'),
        KPICard('active_cases', 'Active Cases', stats['active_cases'],
                'fa-stethoscope', 'text-medical-red',
                subtitle=f"{stats['follow_ups_due']} follow-ups due"),
        KPICard('active_medications', 'Active Medications', stats['active_medications'],
                'fa-pills', 'text-medical-purple',
                subtitle=f"{stats['poor_adherence']} poor adherence"),
        KPICard('pending_labs', 'Pending Labs', stats['pending_labs'],
                'fa-flask', 'text-yellow-600', link='labResults',
                subtitle=f"{stats['critical_labs']} critical"),
        KPICard('unread_messages', 'Unread Messages', stats['unread_messages'],
                'fa-envelope', 'text-blue-600', link='messages'),
    ]
    return [card.to_dict() for card in cards]


def build_status_badges(cache) -> dict[str, list[dict]]:
    """Per-status counts for appointments, disease history and lab results."""
    groups = (
        ('appointments', cache.appointments, 'status', c.APPOINTMENT_STATUS_CHOICES, get_status_color),
        ('disease_history', cache.disease_history, 'status', c.DISEASE_STATUS_CHOICES, get_status_color),
        ('lab_results', cache.lab_results, 'status', c.LAB_STATUS_CHOICES, get_lab_status_color),
    )
    badges = {}
    for name, records, field, choices, color_of in groups:
        counts = kpis.count_by(records, field)
        badges[name] = [
            StatusBadge(label=label, count=counts.get(label, 0), color=color_of(label)).to_dict()
            for label in choices
        ]
    return badges
