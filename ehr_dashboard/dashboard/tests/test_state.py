from __future__ import annotations

from django.test import SimpleTestCase

from ehr_dashboard.dashboard.state import SESSION_KEY, ViewState


class FakeSession(dict):
    modified = False


class ViewStateTest(SimpleTestCase):

    def setUp(self):
        self.session = FakeSession()
        self.state = ViewState(self.session)

    def test_defaults(self):
        self.assertEqual(self.state.current_section, 'dashboard')
        self.assertEqual(self.state.current_ehr_tab, 'overview')
        self.assertIsNone(self.state.modal)
        self.assertFalse(self.state.editing)

    def test_changes_are_written_to_session(self):
        self.state.show_section('patients')

        self.assertTrue(self.session.modified)
        self.assertEqual(self.session[SESSION_KEY]['current_section'], 'patients')
        self.assertEqual(ViewState(self.session).current_section, 'patients')

    def test_unknown_names_raise(self):
        with self.assertRaises(ValueError):
            self.state.show_section('billing')
        with self.assertRaises(ValueError):
            self.state.switch_ehr_tab('imaging')
        with self.assertRaises(ValueError):
            self.state.open_modal('billingForm')
        with self.assertRaises(ValueError):
            self.state.hide_modal('billingForm')
        with self.assertRaises(AttributeError):
            self.state.no_such_field

    def test_search_switches_to_patients(self):
        self.state.set_search('  ann ')
        self.assertEqual(self.state.search_query, 'ann')
        self.assertEqual(self.state.current_section, 'patients')

    def test_view_patient_ehr_resets_tab(self):
        self.state.switch_ehr_tab('vitals')

        self.state.view_patient_ehr('p1')

        self.assertEqual(self.state.current_patient_id, 'p1')
        self.assertEqual(self.state.current_ehr_tab, 'overview')
        self.assertEqual(self.state.modal, 'patientDetails')

    def test_add_patient_is_create(self):
        self.state.view_patient_ehr('p1')
        self.state.hide_modal()

        self.state.open_modal('patientForm')

        self.assertIsNone(self.state.editing_patient_id())
        self.assertIsNone(self.state.current_patient_id)

    def test_edit_patient_then_close_forgets_id(self):
        self.state.open_modal('patientForm', record_id='p1')
        self.assertEqual(self.state.editing_patient_id(), 'p1')

        self.state.hide_modal('patientForm')

        self.assertIsNone(self.state.modal)
        self.assertIsNone(self.state.current_patient_id)
        self.assertIsNone(self.state.editing_patient_id())

    def test_edit_from_details_returns_to_details(self):
        self.state.view_patient_ehr('p1')
        self.state.open_modal('patientForm', record_id='p1')

        self.state.hide_modal('patientForm')

        self.assertEqual(self.state.modal, 'patientDetails')
        self.assertEqual(self.state.current_patient_id, 'p1')
        self.assertFalse(self.state.editing)

    def test_disease_form_edit_and_close(self):
        self.state.view_disease_history('p1')
        self.state.open_modal('diseaseForm', patient_id='p1', record_id='d1')

        self.assertEqual(self.state.editing_disease_id(), 'd1')
        self.assertEqual(self.state.form_patient_id, 'p1')

        self.state.hide_modal('diseaseForm')

        self.assertEqual(self.state.modal, 'diseaseHistory')
        self.assertIsNone(self.state.current_disease_id)
        self.assertIsNone(self.state.form_patient_id)
        self.assertIsNone(self.state.editing_disease_id())

    def test_closing_a_modal_that_is_not_open_changes_nothing(self):
        self.state.view_disease_history('p1')
        self.state.open_modal('diseaseForm', patient_id='p1', record_id='d1')
        before = self.state.as_dict()

        self.state.hide_modal('patientForm')
        self.state.hide_modal('patientDetails')

        self.assertEqual(self.state.as_dict(), before)
        self.assertEqual(self.state.editing_disease_id(), 'd1')
        self.assertEqual(self.state.current_patient_id, 'p1')

    def test_hide_without_open_modal(self):
        self.state.hide_modal()
        self.assertIsNone(self.state.modal)
        self.assertNotIn(SESSION_KEY, self.session)

    def test_editing_id_only_for_open_form(self):
        self.state.open_modal('diseaseForm', patient_id='p1', record_id='d1')
        self.assertIsNone(self.state.editing_id('patientForm'))
        self.assertIsNone(self.state.editing_id('vitalsForm'))

    def test_child_form_is_never_editing(self):
        self.state.open_modal('vitalsForm', patient_id='p1', record_id='v1')
        self.assertFalse(self.state.editing)
        self.assertIsNone(self.state.editing_id('vitalsForm'))

    def test_forget_patient(self):
        self.state.view_patient_ehr('p1')

        self.state.forget_patient('p2')
        self.assertEqual(self.state.current_patient_id, 'p1')

        self.state.forget_patient('p1')
        self.assertIsNone(self.state.current_patient_id)
        self.assertIsNone(self.state.modal)
