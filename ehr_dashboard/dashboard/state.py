"""
View state of the dashboard, kept in the session.

Which section is shown, which patient is selected, which EHR tab and which
modal are open, and which record a form is editing. Every view reads and
mutates this; the data itself is never stored here.
"""
from __future__ import annotations

from typing import Any

SESSION_KEY = 'ehr_view_state'

SECTIONS = ('dashboard', 'patients', 'appointments', 'labResults', 'messages', 'analytics')
DEFAULT_SECTION = 'dashboard'

EHR_TABS = ('overview', 'vitals', 'medications', 'lab-results', 'appointments', 'notes')
DEFAULT_EHR_TAB = 'overview'

MODALS = (
    'patientDetails',
    'patientForm',
    'diseaseHistory',
    'diseaseForm',
    'appointmentForm',
    'vitalsForm',
    'medicationForm',
    'labResultForm',
    'messageForm',
)

# Form modals whose record id selects update over create
EDITABLE_FORMS = {
    'patientForm': 'current_patient_id',
    'diseaseForm': 'current_disease_id',
}

# Modals a form returns to when it is closed
PARENT_MODALS = ('patientDetails', 'diseaseHistory')

DEFAULTS: dict[str, Any] = {
    'current_section': DEFAULT_SECTION,
    'current_patient_id': None,
    'current_disease_id': None,
    'current_ehr_tab': DEFAULT_EHR_TAB,
    'modal': None,
    'return_modal': None,
    'editing': False,
    'form_patient_id': None,
    'search_query': '',
    'appointment_status': '',
    'appointment_date': '',
}


class ViewState:
    """Session-backed view state. Unknown names raise ``ValueError``."""

    def __init__(self, session):
        self.session = session
        stored = session.get(SESSION_KEY) or {}
        self.data = {key: stored.get(key, default) for key, default in DEFAULTS.items()}

    def __getattr__(self, name):
        try:
            return self.__dict__['data'][name]
        except KeyError:
            raise AttributeError(name) from None

    def _set(self, **values):
        self.data.update(values)
        self.session[SESSION_KEY] = dict(self.data)
        self.session.modified = True

    def as_dict(self) -> dict[str, Any]:
        return dict(self.data)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def show_section(self, name: str):
        if name not in SECTIONS:
            raise ValueError(f'Unknown section: {name}')
        self._set(current_section=name)

    def set_search(self, query: str):
        self._set(search_query=(query or '').strip(), current_section='patients')

    def set_appointment_filter(self, status: str = '', on_date: str = ''):
        self._set(appointment_status=status or '', appointment_date=on_date or '', current_section='appointments')

    # ------------------------------------------------------------------
    # EHR
    # ------------------------------------------------------------------

    def view_patient_ehr(self, patient_id: str):
        """Select a patient, reset to the overview tab and open the details modal."""
        self._set(
            current_patient_id=str(patient_id),
            current_ehr_tab=DEFAULT_EHR_TAB,
            modal='patientDetails',
            return_modal=None,
            editing=False,
        )

    def switch_ehr_tab(self, tab: str):
        if tab not in EHR_TABS:
            raise ValueError(f'Unknown EHR tab: {tab}')
        self._set(current_ehr_tab=tab)

    def view_disease_history(self, patient_id: str):
        self._set(current_patient_id=str(patient_id), modal='diseaseHistory', return_modal=None, editing=False)

    # ------------------------------------------------------------------
    # Modals
    # ------------------------------------------------------------------

    def open_modal(self, name: str, patient_id: str | None = None, record_id: str | None = None):
        """Open a modal. A ``record_id`` on an editable form means edit, otherwise add."""
        if name not in MODALS:
            raise ValueError(f'Unknown modal: {name}')

        values: dict[str, Any] = {'modal': name}
        values['return_modal'] = self.modal if self.modal in PARENT_MODALS and self.modal != name else None

        # Patient a child-record form is bound to; unbound forms offer a patient select
        values['form_patient_id'] = str(patient_id) if patient_id and name != 'patientForm' else None

        if name == 'diseaseForm':
            values['current_disease_id'] = str(record_id) if record_id else None
            values['editing'] = bool(record_id)
        elif name == 'patientForm':
            # The patient form edits the selected patient or starts blank
            values['current_patient_id'] = str(record_id) if record_id else None
            values['editing'] = bool(record_id)
            if not record_id:
                values['return_modal'] = None
        else:
            values['editing'] = False
        self._set(**values)

    def hide_modal(self, name: str | None = None):
        """Close the open modal; a closed form forgets the record it was editing."""
        if name is not None and name not in MODALS:
            raise ValueError(f'Unknown modal: {name}')
        closing = name or self.modal
        # Closing a modal that is not open leaves the open one untouched
        if closing is None or closing != self.modal:
            return
        values: dict[str, Any] = {
            'modal': self.return_modal,
            'return_modal': None,
            'form_patient_id': None,
        }
        if closing == 'diseaseForm':
            values['current_disease_id'] = None
            values['editing'] = False
        elif closing == 'patientForm':
            values['editing'] = False
            if values['modal'] not in PARENT_MODALS:
                values['current_patient_id'] = None
        self._set(**values)

    def forget_patient(self, patient_id: str):
        """Drop every reference to a deleted patient."""
        if str(self.current_patient_id) != str(patient_id):
            return
        self._set(
            current_patient_id=None,
            current_disease_id=None,
            modal=None,
            return_modal=None,
            editing=False,
        )

    # ------------------------------------------------------------------
    # Upsert targets
    # ------------------------------------------------------------------

    def editing_id(self, modal: str) -> str | None:
        """Record id a form updates, or ``None`` when it creates."""
        field = EDITABLE_FORMS.get(modal)
        if field is None or not self.editing or self.modal != modal:
            return None
        return self.data.get(field)

    def editing_patient_id(self) -> str | None:
        return self.editing_id('patientForm')

    def editing_disease_id(self) -> str | None:
        return self.editing_id('diseaseForm')
