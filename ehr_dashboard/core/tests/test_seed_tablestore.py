from __future__ import annotations

from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase

from ehr_dashboard.core.seeders import seed_tablestore
from ehr_dashboard.records.constants import RESOURCES
from ehr_dashboard.tablestore.testing import InMemoryTableStore

COMMAND_CLIENT = 'ehr_dashboard.core.management.commands.seed_tablestore.get_client'


class SeedTableStoreTest(SimpleTestCase):

    def test_children_reference_created_patients(self):
        store = InMemoryTableStore()

        stats = seed_tablestore(store, patients=5)

        self.assertEqual(stats['patients_created'], 5)
        ids = {p['id'] for p in store.tables['patients']}
        for resource in RESOURCES:
            if resource in ('patients', 'prescriptions'):
                continue
            with self.subTest(resource=resource):
                self.assertEqual(stats[f'{resource}_created'], len(store.tables[resource]))
                self.assertTrue(all(r['patient_id'] in ids for r in store.tables[resource]))

    def test_reproducible(self):
        first, second = InMemoryTableStore(), InMemoryTableStore()
        seed_tablestore(first, patients=3)
        seed_tablestore(second, patients=3)
        self.assertEqual(
            [p['first_name'] for p in first.tables['patients']],
            [p['first_name'] for p in second.tables['patients']],
        )

    def test_flush_deletes_existing(self):
        store = InMemoryTableStore({'patients': [{'id': 'old'}], 'vitals': [{'id': 'v-old', 'patient_id': 'old'}]})

        stats = seed_tablestore(store, patients=1, flush=True)

        self.assertEqual(stats['patients_deleted'], 1)
        self.assertEqual(stats['vitals_deleted'], 1)
        self.assertNotIn('old', [p['id'] for p in store.tables['patients']])


class SeedCommandTest(SimpleTestCase):

    def test_command(self):
        store = InMemoryTableStore()
        out = StringIO()

        with mock.patch(COMMAND_CLIENT, return_value=store):
            call_command('seed_tablestore', '--patients', '2', stdout=out)

        self.assertEqual(len(store.tables['patients']), 2)
        self.assertIn('patients_created: 2', out.getvalue())

    def test_store_failure_is_command_error(self):
        store = InMemoryTableStore()
        store.fail_on('POST', 'patients')

        with mock.patch(COMMAND_CLIENT, return_value=store):
            with self.assertRaises(CommandError):
                call_command('seed_tablestore', stdout=StringIO())
