"""
Dashboard Views

Every GET builds a fresh ``DataCache`` and renders from it. Every POST
writes to the table store, adds a success or error message and redirects
back to the page (Post/Redirect/Get), so the next GET re-fetches everything.
"""
from __future__ import annotations

import logging

from django.contrib import messages
from django.http import Http404, HttpResponse, JsonResponse
from django.middleware.csrf import get_token
from django.shortcuts import redirect, render
from django.utils.dateparse import parse_date
from django.utils.safestring import SafeString
from django.views import View
from rest_framework import serializers

from ehr_dashboard.core.utils import log_patient_action
from ehr_dashboard.records import constants as c
from ehr_dashboard.records.services import delete_patient, delete_record, save_record
from ehr_dashboard.tablestore.cache import DataCache
from ehr_dashboard.tablestore.client import get_client
from ehr_dashboard.tablestore.exceptions import TableStoreError

from . import fragments, kpis
from .charts import get_all_charts
from .state import SECTIONS, ViewState
from .widgets import build_kpi_cards, build_status_badges

logger = logging.getLogger(__name__)


def load_cache() -> DataCache:
    return DataCache(get_client()).refresh()


def render_section(name: str, cache: DataCache, state: ViewState, csrf_token: str = '') -> SafeString:
    """Markup of one navigation section."""
    if name not in SECTIONS:
        raise ValueError(f'Unknown section: {name}')
    patients = fragments.patients_by_id(cache.patients)

    if name == 'dashboard':
        stats = kpis.get_dashboard_stats(cache)
        return fragments.render_dashboard_section(
            build_kpi_cards(stats),
            kpis.todays_appointments(cache.appointments),
            patients,
            kpis.build_critical_alerts(cache),
        )
    if name == 'patients':
        return fragments.render_patients_section(
            cache.patients, cache.appointments, state.search_query, csrf_token
        )
    if name == 'appointments':
        appointments = kpis.filter_appointments(
            cache.appointments,
            status=state.appointment_status or None,
            on_date=parse_date(state.appointment_date) if state.appointment_date else None,
        )
        return fragments.render_appointments_section(
            appointments, patients, state.appointment_status, state.appointment_date, csrf_token
        )
    if name == 'labResults':
        return fragments.render_lab_results_section(cache.lab_results, patients, csrf_token)
    if name == 'messages':
        return fragments.render_messages_section(cache.messages, patients, csrf_token)
    return fragments.render_analytics_section(get_all_charts(cache))


def render_modal(cache: DataCache, state: ViewState, csrf_token: str = '') -> SafeString:
    """Markup of the open modal, or nothing."""
    modal = state.modal
    if not modal:
        return fragments.EMPTY

    if modal == 'patientDetails':
        ehr = kpis.patient_ehr(cache, state.current_patient_id)
        if ehr is None:
            return fragments.EMPTY
        body = fragments.render_patient_details(ehr, state.current_ehr_tab, csrf_token)
        return fragments.render_modal_shell(modal, body)

    if modal == 'diseaseHistory':
        patient = cache.find_patient(state.current_patient_id)
        if patient is None:
            return fragments.EMPTY
        records = cache.for_patient(c.DISEASE_HISTORY, patient.get('id'))
        return fragments.render_modal_shell(modal, fragments.render_disease_history(patient, records, csrf_token))

    initial = None
    if modal == 'patientForm' and state.editing_patient_id():
        initial = cache.find_patient(state.editing_patient_id())
    elif modal == 'diseaseForm' and state.editing_disease_id():
        initial = cache.find(c.DISEASE_HISTORY, state.editing_disease_id())

    return fragments.render_form(
        modal,
        csrf_token=csrf_token,
        initial=initial,
        patients=cache.patients,
        patient_id=state.form_patient_id,
        editing=initial is not None,
    )


class StateMixin:
    """Gives a view the session view state and a lazily refreshed cache."""

    def get_state(self) -> ViewState:
        if not hasattr(self, '_state'):
            self._state = ViewState(self.request.session)
        return self._state

    def get_cache(self) -> DataCache:
        if not hasattr(self, '_cache'):
            self._cache = load_cache()
            if not self._cache.ok:
                messages.warning(
                    self.request,
                    'Some records could not be loaded: ' + ', '.join(self._cache.failed_tables),
                )
        return self._cache


class DashboardView(StateMixin, View):
    """Full page: navigation, current section, open modal, messages"""

    def get(self, request):
        state = self.get_state()
        cache = self.get_cache()
        csrf_token = get_token(request)

        context = {
            'title': 'EHR Dashboard',
            'state': state.as_dict(),
            'nav': fragments.render_nav(state.current_section),
            'section': render_section(state.current_section, cache, state, csrf_token),
            'modal': render_modal(cache, state, csrf_token),
            'loaded_at': cache.loaded_at,
        }
        return render(request, 'dashboard/index.html', context)


class SectionView(StateMixin, View):

    def get(self, request, name):
        try:
            self.get_state().show_section(name)
        except ValueError:
            raise Http404(f'Unknown section: {name}')
        return redirect('dashboard:index')


class SectionFragmentView(StateMixin, View):
    """Only the markup of one section, for partial refreshes"""

    def get(self, request, name):
        if name not in SECTIONS:
            raise Http404(f'Unknown section: {name}')
        html = render_section(name, self.get_cache(), self.get_state(), get_token(request))
        return HttpResponse(html)


class PatientSearchView(StateMixin, View):
    """Search patients; an empty query clears the search"""

    def get(self, request):
        self.get_state().set_search(request.GET.get('q', ''))
        return redirect('dashboard:index')


class PatientEHRView(StateMixin, View):

    def get(self, request, patient_id):
        cache = self.get_cache()
        if cache.find_patient(patient_id) is None:
            messages.error(request, 'Patient not found')
            return redirect('dashboard:index')
        self.get_state().view_patient_ehr(patient_id)
        log_patient_action(request.user, 'patient_ehr_view', patient_id)
        return redirect('dashboard:index')


class EHRTabView(StateMixin, View):

    def get(self, request, tab):
        state = self.get_state()
        try:
            state.switch_ehr_tab(tab)
        except ValueError:
            raise Http404(f'Unknown EHR tab: {tab}')

        if request.GET.get('partial'):
            ehr = kpis.patient_ehr(self.get_cache(), state.current_patient_id)
            if ehr is None:
                raise Http404('No patient selected')
            return HttpResponse(fragments.render_ehr_tab(tab, ehr, get_token(request)))
        return redirect('dashboard:index')


class DiseaseHistoryView(StateMixin, View):

    def get(self, request, patient_id):
        if self.get_cache().find_patient(patient_id) is None:
            messages.error(request, 'Patient not found')
            return redirect('dashboard:index')
        self.get_state().view_disease_history(patient_id)
        return redirect('dashboard:index')


class ModalView(StateMixin, View):
    """Open a modal; ``record_id`` puts the patient or disease form in edit mode"""

    def get(self, request, name):
        try:
            self.get_state().open_modal(
                name,
                patient_id=request.GET.get('patient_id') or None,
                record_id=request.GET.get('record_id') or None,
            )
        except ValueError:
            raise Http404(f'Unknown modal: {name}')
        return redirect('dashboard:index')


class CloseModalView(StateMixin, View):

    def get(self, request, name):
        try:
            self.get_state().hide_modal(name)
        except ValueError:
            raise Http404(f'Unknown modal: {name}')
        return redirect('dashboard:index')


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

def _validation_summary(errors) -> str:
    if isinstance(errors, dict):
        return ', '.join(str(field) for field in errors)
    return '; '.join(str(e) for e in errors)


class RecordFormView(StateMixin, View):
    """
    Create or update one record from a submitted form.

    The record id to update comes from the view state, never from the
    request: a tracked id selects PUT, its absence POST.
    """
    form = None
    modal = None
    created_message = None
    updated_message = None
    error_message = None

    def get_data(self, state: ViewState):
        data = self.request.POST.copy()
        if self.form != 'patient' and not data.get('patient_id') and state.form_patient_id:
            data['patient_id'] = state.form_patient_id
        return data

    def post(self, request):
        state = self.get_state()
        record_id = state.editing_id(self.modal)

        try:
            record, created = save_record(get_client(), self.form, self.get_data(state), record_id=record_id)
        except serializers.ValidationError as exc:
            logger.warning('Invalid %s form: %s', self.form, exc.detail)
            messages.error(request, f'{self.error_message}: check {_validation_summary(exc.detail)}')
            return redirect('dashboard:index')
        except TableStoreError:
            logger.exception('Error saving %s', self.form)
            messages.error(request, self.error_message)
            return redirect('dashboard:index')

        patient_id = record.get('id') if self.form == 'patient' else record.get('patient_id')
        log_patient_action(
            request.user,
            f'{self.form}_{"create" if created else "update"}',
            patient_id or record_id,
        )
        messages.success(request, self.created_message if created else (self.updated_message or self.created_message))
        state.hide_modal(self.modal)
        return redirect('dashboard:index')


class PatientFormView(RecordFormView):
    form = 'patient'
    modal = 'patientForm'
    created_message = 'Patient added successfully'
    updated_message = 'Patient updated successfully'
    error_message = 'Error saving patient'


class DiseaseFormView(RecordFormView):
    form = 'disease'
    modal = 'diseaseForm'
    created_message = 'Disease history added successfully'
    updated_message = 'Disease history updated successfully'
    error_message = 'Error saving disease history'


class AppointmentFormView(RecordFormView):
    form = 'appointment'
    modal = 'appointmentForm'
    created_message = 'Appointment scheduled successfully'
    error_message = 'Error scheduling appointment'


class VitalsFormView(RecordFormView):
    form = 'vitals'
    modal = 'vitalsForm'
    created_message = 'Vital signs recorded successfully'
    error_message = 'Error recording vital signs'


class MedicationFormView(RecordFormView):
    form = 'medication'
    modal = 'medicationForm'
    created_message = 'Medication added successfully'
    error_message = 'Error saving medication'


class LabResultFormView(RecordFormView):
    form = 'lab_result'
    modal = 'labResultForm'
    created_message = 'Lab result added successfully'
    error_message = 'Error saving lab result'


class MessageFormView(RecordFormView):
    form = 'message'
    modal = 'messageForm'
    created_message = 'Message sent successfully'
    error_message = 'Error sending message'


# ---------------------------------------------------------------------------
# Deletes
# ---------------------------------------------------------------------------

# table -> label used in the messages
DELETABLE_TABLES = {
    c.VITALS: 'Vital signs',
    c.DISEASE_HISTORY: 'Disease history',
    c.APPOINTMENTS: 'Appointment',
    c.MEDICATIONS: 'Medication',
    c.LAB_RESULTS: 'Lab result',
    c.MESSAGES: 'Message',
}


class DeleteRecordView(StateMixin, View):

    def post(self, request, table, record_id):
        label = DELETABLE_TABLES.get(table)
        if label is None:
            raise Http404(f'Records of {table} cannot be deleted here')
        try:
            delete_record(get_client(), table, record_id)
        except TableStoreError:
            logger.exception('Error deleting %s %s', table, record_id)
            messages.error(request, f'Error deleting {label.lower()}')
        else:
            messages.success(request, f'{label} deleted successfully')
        return redirect('dashboard:index')


class DeletePatientView(StateMixin, View):
    """Delete a patient and then its disease history, one record at a time"""

    def post(self, request, patient_id):
        client = get_client()
        try:
            disease_history = client.list(c.DISEASE_HISTORY)
            delete_patient(client, patient_id, disease_history)
        except TableStoreError:
            logger.exception('Error deleting patient %s', patient_id)
            messages.error(request, 'Error deleting patient')
        else:
            log_patient_action(request.user, 'patient_delete', patient_id)
            messages.success(request, 'Patient deleted successfully')
            self.get_state().forget_patient(patient_id)
        return redirect('dashboard:index')


class AppointmentFilterView(StateMixin, View):

    def get(self, request):
        status = request.GET.get('status', '')
        on_date = request.GET.get('date', '')
        if status and status not in c.APPOINTMENT_STATUS_CHOICES:
            status = ''
        try:
            if on_date and parse_date(on_date) is None:
                on_date = ''
        except ValueError:
            on_date = ''
        self.get_state().set_appointment_filter(status, on_date)
        return redirect('dashboard:index')


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

class DashboardAPIView(View):
    """Dashboard data as JSON (stats, alerts, charts)"""

    def get(self, request):
        cache = load_cache()
        stats = kpis.get_dashboard_stats(cache)

        return JsonResponse({
            'stats': stats,
            'kpi_cards': build_kpi_cards(stats),
            'status_badges': build_status_badges(cache),
            'alerts': kpis.build_critical_alerts(cache),
            'todays_appointments': kpis.todays_appointments(cache.appointments),
            'charts': get_all_charts(cache),
            'failed_tables': cache.failed_tables,
            'loaded_at': cache.loaded_at,
        })


class PatientAPIView(View):
    """EHR aggregate of one patient as JSON"""

    def get(self, request, patient_id):
        ehr = kpis.patient_ehr(load_cache(), patient_id)
        if ehr is None:
            return JsonResponse({'detail': 'Patient not found'}, status=404)
        log_patient_action(request.user, 'patient_api_view', patient_id)
        return JsonResponse(ehr)
