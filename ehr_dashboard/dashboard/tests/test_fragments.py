from __future__ import annotations

import json

from django.test import SimpleTestCase, override_settings

from ehr_dashboard.dashboard import fragments


def _ehr(**overrides):
    ehr = {
        'patient': {'id': 'p1', 'first_name': 'Ann', 'last_name': 'Doe'},
        'name': 'Ann Doe',
        'age': 44,
        'disease_history': [],
        'active_conditions': [],
        'vitals': [],
        'latest_vitals': None,
        'medications': [],
        'current_medications': [],
        'lab_results': [],
        'appointments': [],
        'soap_notes': [],
        'messages': [],
        'last_visit': None,
    }
    ehr.update(overrides)
    return ehr


class FormattingTest(SimpleTestCase):

    def test_format_day(self):
        self.assertEqual(fragments.format_day('2024-03-05'), '3/5/2024')
        self.assertEqual(fragments.format_day(None), 'N/A')
        self.assertEqual(fragments.format_day('junk', default=''), '')

    @override_settings(TIME_ZONE='UTC')
    def test_format_time(self):
        self.assertEqual(fragments.format_time('2024-03-05T14:30:00Z'), '02:30 PM')
        self.assertEqual(fragments.format_time(None), '')


class EscapingTest(SimpleTestCase):

    def test_patient_fields_are_escaped(self):
        patient = {'id': 'p1', 'first_name': '<script>alert(1)</script>', 'last_name': 'Doe', 'email': '"x"@y'}

        html = fragments.render_patients_table([patient], [])

        self.assertNotIn('<script>', html)
        self.assertIn('&lt;script&gt;alert(1)&lt;/script&gt; Doe', html)
        self.assertIn('&quot;x&quot;@y', html)

    def test_alert_message_is_escaped(self):
        html = fragments.render_critical_alerts([{'type': 'critical', 'icon': 'fa-flask', 'message': '<b>K+</b>'}])
        self.assertIn('&lt;b&gt;K+&lt;/b&gt;', html)

    def test_analytics_json_cannot_break_out(self):
        html = fragments.render_analytics_section({'conditions': {'labels': ['</script><script>x']}})
        self.assertNotIn('</script><script>', html)
        self.assertIn('id="conditions-data"', html)


class EmptyStatesTest(SimpleTestCase):

    def test_messages(self):
        self.assertIn('No appointments scheduled for today', fragments.render_todays_schedule([], {}))
        self.assertIn('No critical alerts at this time', fragments.render_critical_alerts([]))
        self.assertIn('No patients found. Click &quot;Add Patient&quot; to get started.', fragments.render_patients_table([], []))
        self.assertIn('No vital signs recorded for this patient.', fragments.render_ehr_vitals(_ehr()))
        self.assertIn('No current medications', fragments.render_ehr_overview(_ehr()))
        self.assertIn('No active conditions', fragments.render_ehr_overview(_ehr()))
        self.assertIn(
            'No disease history recorded for this patient.',
            fragments.render_disease_history({'id': 'p1', 'first_name': 'Ann'}, []),
        )


class PatientsSectionTest(SimpleTestCase):

    def test_search_filters_rows(self):
        patients = [
            {'id': 'p1', 'first_name': 'Ann', 'last_name': 'Doe'},
            {'id': 'p2', 'first_name': 'Bob', 'last_name': 'Roe'},
        ]
        html = fragments.render_patients_section(patients, [], query='bob', csrf_token='tok')

        self.assertIn('data-patient-id="p2"', html)
        self.assertNotIn('data-patient-id="p1"', html)
        self.assertIn('value="bob"', html)
        self.assertIn('name="csrfmiddlewaretoken" value="tok"', html)

    def test_last_visit(self):
        patient = {'id': 'p1', 'first_name': 'Ann'}
        appointments = [{'patient_id': 'p1', 'status': 'Completed', 'appointment_date': '2024-02-01T10:00:00Z'}]

        self.assertIn('2/1/2024', fragments.render_patient_row(patient, appointments))
        self.assertIn('No visits', fragments.render_patient_row(patient, []))

    def test_delete_asks_for_confirmation(self):
        html = fragments.render_patient_row({'id': 'p1', 'first_name': 'Ann'}, [], csrf_token='tok')

        self.assertIn(f'data-confirm="{fragments.DELETE_PATIENT_CONFIRM}"', html)
        self.assertIn('onsubmit="return !this.dataset.confirm || window.confirm(this.dataset.confirm);"', html)


class EHRTabsTest(SimpleTestCase):

    def test_every_tab_renders(self):
        for tab in fragments.EHR_TAB_RENDERERS:
            with self.subTest(tab=tab):
                self.assertTrue(fragments.render_ehr_tab(tab, _ehr()))

    def test_unknown_tab(self):
        with self.assertRaises(ValueError):
            fragments.render_ehr_tab('imaging', _ehr())

    def test_vitals_rows_have_delete_buttons(self):
        ehr = _ehr(vitals=[{'id': 'v1', 'recorded_date': '2024-03-01', 'heart_rate': 72}])
        html = fragments.render_ehr_vitals(ehr, csrf_token='tok')
        self.assertIn('/records/vitals/v1/delete/', html)
        self.assertIn('3/1/2024', html)

    def test_overview_shows_latest_vitals(self):
        ehr = _ehr(latest_vitals={'blood_pressure_systolic': 120, 'blood_pressure_diastolic': 80, 'bmi': 22.1})
        html = fragments.render_ehr_overview(ehr)
        self.assertIn('120/80 mmHg', html)
        self.assertIn('22.1', html)


class FormsTest(SimpleTestCase):

    def test_unknown_form(self):
        with self.assertRaises(ValueError):
            fragments.render_form('billingForm')

    def test_edit_form_is_prefilled(self):
        html = fragments.render_form(
            'patientForm',
            initial={'first_name': 'Ann', 'date_of_birth': '1980-02-29T00:00:00Z', 'gender': 'Female'},
            editing=True,
        )
        self.assertIn('Edit Patient', html)
        self.assertIn('id="id_first_name" value="Ann"', html)
        self.assertIn('value="1980-02-29"', html)
        self.assertIn('<option value="Female" selected>', html)
        self.assertNotIn('name="patient_id"', html)

    def test_bound_child_form_has_hidden_patient(self):
        html = fragments.render_form('vitalsForm', patient_id='p1')
        self.assertIn('<input type="hidden" name="patient_id" value="p1">', html)
        self.assertIn('action="/forms/vitals/"', html)

    def test_unbound_child_form_offers_patient_select(self):
        html = fragments.render_form('appointmentForm', patients=[{'id': 'p1', 'first_name': 'Ann'}])
        self.assertIn('id="id_patient_id"', html)
        self.assertIn('<option value="p1">Ann</option>', html)
        self.assertIn('id="id_duration" value="30"', html)
        self.assertIn('Schedule Appointment', html)


class AnalyticsTest(SimpleTestCase):

    def test_json_script_payload(self):
        html = fragments.render_analytics_section({'demographics': {'labels': ['Female'], 'datasets': []}})
        start = html.index('>', html.index('id="demographics-data"')) + 1
        payload = html[start:html.index('</script>', start)]
        self.assertEqual(json.loads(payload), {'labels': ['Female'], 'datasets': []})
