from __future__ import annotations

from unittest import mock

from django.test import RequestFactory, SimpleTestCase
from django.urls import reverse

from ehr_dashboard.core.views import health
from ehr_dashboard.tablestore.exceptions import TableStoreUnavailable
from ehr_dashboard.tablestore.testing import InMemoryTableStore


class HealthTest(SimpleTestCase):

    def test_ok(self):
        store = InMemoryTableStore()
        with mock.patch('ehr_dashboard.core.views.get_client', return_value=store):
            r = self.client.get(reverse('core:health'))

        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {'status': 'ok'})
        self.assertEqual(store.calls, [('GET', 'patients', None)])

    def test_store_down(self):
        store = InMemoryTableStore()
        store.fail_on('GET', 'patients', exc=TableStoreUnavailable('connection refused', resource='patients'))

        with mock.patch('ehr_dashboard.core.views.get_client', return_value=store):
            with self.assertLogs('ehr_dashboard.core.views', level='WARNING'):
                r = self.client.get('/api/health/')

        self.assertEqual(r.status_code, 503)
        self.assertEqual(r.json(), {'status': 'error', 'detail': 'connection refused', 'resource': 'patients'})


class HealthViewFunctionTest(SimpleTestCase):

    def test_called_directly(self):
        request = RequestFactory().get('/api/health/')
        with mock.patch('ehr_dashboard.core.views.get_client', return_value=InMemoryTableStore()):
            response = health(request)
        self.assertEqual(response.status_code, 200)
