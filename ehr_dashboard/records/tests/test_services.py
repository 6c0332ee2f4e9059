from __future__ import annotations

from django.test import SimpleTestCase
from rest_framework import serializers

from ehr_dashboard.records.services import (
    PartialDeleteError,
    delete_patient,
    delete_record,
    get_form_serializer,
    save_record,
)
from ehr_dashboard.tablestore.testing import InMemoryTableStore


class SaveRecordTest(SimpleTestCase):

    def setUp(self):
        self.store = InMemoryTableStore({'patients': [{'id': 'p1', 'first_name': 'Ann', 'last_name': 'Doe'}]})

    def test_without_record_id_creates(self):
        record, created = save_record(self.store, 'patient', {'first_name': 'Bob', 'last_name': 'Roe'})

        self.assertTrue(created)
        self.assertEqual(self.store.calls, [('POST', 'patients', None)])
        self.assertEqual(record['first_name'], 'Bob')

    def test_with_record_id_updates(self):
        record, created = save_record(
            self.store, 'patient', {'first_name': 'Anna', 'last_name': 'Doe'}, record_id='p1'
        )

        self.assertFalse(created)
        self.assertEqual(self.store.calls, [('PUT', 'patients', 'p1')])
        self.assertEqual(self.store.tables['patients'][0]['first_name'], 'Anna')

    def test_invalid_data_never_reaches_store(self):
        with self.assertRaises(serializers.ValidationError):
            save_record(self.store, 'patient', {'first_name': 'Bob'})
        self.assertEqual(self.store.calls, [])

    def test_unknown_form(self):
        with self.assertRaises(ValueError):
            get_form_serializer('invoice', {})


class DeleteRecordTest(SimpleTestCase):

    def test_deletes(self):
        store = InMemoryTableStore({'vitals': [{'id': 'v1'}]})
        delete_record(store, 'vitals', 'v1')
        self.assertEqual(store.tables['vitals'], [])

    def test_unknown_resource(self):
        store = InMemoryTableStore()
        with self.assertRaises(ValueError):
            delete_record(store, 'invoices', 'x')
        self.assertEqual(store.calls, [])


class DeletePatientTest(SimpleTestCase):

    def setUp(self):
        self.history = [
            {'id': 'd1', 'patient_id': 'p1'},
            {'id': 'd2', 'patient_id': 'p2'},
            {'id': 'd3', 'patient_id': 'p1'},
            {'id': 'd4', 'patient_id': 'p1'},
        ]
        self.store = InMemoryTableStore({
            'patients': [{'id': 'p1'}, {'id': 'p2'}],
            'disease_history': self.history,
        })

    def test_patient_first_then_own_history(self):
        deleted = delete_patient(self.store, 'p1', self.history)

        self.assertEqual(deleted, 3)
        self.assertEqual(
            self.store.methods('DELETE'),
            [
                ('DELETE', 'patients', 'p1'),
                ('DELETE', 'disease_history', 'd1'),
                ('DELETE', 'disease_history', 'd3'),
                ('DELETE', 'disease_history', 'd4'),
            ],
        )
        self.assertEqual([d['id'] for d in self.store.tables['disease_history']], ['d2'])

    def test_failed_patient_delete_touches_nothing_else(self):
        self.store.fail_on('DELETE', 'patients', 'p1')

        with self.assertRaises(Exception):
            delete_patient(self.store, 'p1', self.history)

        self.assertEqual(self.store.methods('DELETE'), [('DELETE', 'patients', 'p1')])
        self.assertEqual(len(self.store.tables['disease_history']), 4)

    def test_cascade_stops_at_first_failure(self):
        self.store.fail_on('DELETE', 'disease_history', 'd3')

        with self.assertLogs('ehr_dashboard.records.services', level='ERROR'):
            with self.assertRaises(PartialDeleteError) as ctx:
                delete_patient(self.store, 'p1', self.history)

        self.assertEqual(ctx.exception.remaining, ['d3', 'd4'])
        self.assertEqual(ctx.exception.record_id, 'd3')
        self.assertEqual(ctx.exception.to_dict()['remaining'], ['d3', 'd4'])
        # d4 was never attempted
        self.assertNotIn(('DELETE', 'disease_history', 'd4'), self.store.calls)
        self.assertEqual(self.store.tables['patients'], [{'id': 'p2'}])
