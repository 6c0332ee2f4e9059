from __future__ import annotations

from unittest import mock

import requests
from django.test import SimpleTestCase, override_settings

from ehr_dashboard.tablestore.client import TableStoreClient, get_client
from ehr_dashboard.tablestore.exceptions import (
    TableStorePayloadError,
    TableStoreResponseError,
    TableStoreUnavailable,
    UnknownResourceError,
)


def _response(status=200, payload=None, content=b'{}', text=''):
    response = mock.Mock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.content = content
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


class TableStoreClientTest(SimpleTestCase):

    def setUp(self):
        self.session = mock.MagicMock()
        self.client_ = TableStoreClient('http://store.local/', timeout=3, session=self.session)

    def test_url_for_strips_trailing_slash(self):
        self.assertEqual(self.client_.url_for('patients'), 'http://store.local/tables/patients')
        self.assertEqual(self.client_.url_for('vitals', 'v1'), 'http://store.local/tables/vitals/v1')

    def test_url_for_unknown_resource(self):
        with self.assertRaises(UnknownResourceError) as ctx:
            self.client_.url_for('invoices')
        self.assertEqual(ctx.exception.resource, 'invoices')
        self.session.request.assert_not_called()

    def test_list_returns_data_array(self):
        self.session.request.return_value = _response(payload={'data': [{'id': 'p1'}], 'total': 1})

        rows = self.client_.list('patients')

        self.assertEqual(rows, [{'id': 'p1'}])
        self.session.request.assert_called_once_with(
            'GET', 'http://store.local/tables/patients', json=None, timeout=3
        )

    def test_list_missing_data_is_empty(self):
        self.session.request.return_value = _response(payload={})
        self.assertEqual(self.client_.list('patients'), [])

    def test_list_rejects_non_list_data(self):
        self.session.request.return_value = _response(payload={'data': {'id': 'p1'}})
        with self.assertRaises(TableStorePayloadError):
            self.client_.list('patients')

    def test_list_rejects_non_object_records(self):
        self.session.request.return_value = _response(payload={'data': [{'id': 'p1'}, None]})
        with self.assertRaises(TableStorePayloadError) as ctx:
            self.client_.list('patients')
        self.assertEqual(ctx.exception.resource, 'patients')

    def test_list_rejects_non_json_body(self):
        self.session.request.return_value = _response(payload=ValueError('no json'))
        with self.assertRaises(TableStorePayloadError):
            self.client_.list('patients')

    def test_create_posts_json(self):
        self.session.request.return_value = _response(payload={'id': 'p9', 'first_name': 'Ann'})

        record = self.client_.create('patients', {'first_name': 'Ann'})

        self.assertEqual(record['id'], 'p9')
        self.session.request.assert_called_once_with(
            'POST', 'http://store.local/tables/patients', json={'first_name': 'Ann'}, timeout=3
        )

    def test_upsert_with_id_puts(self):
        self.session.request.return_value = _response(payload={'id': 'p1'})

        self.client_.upsert('patients', {'first_name': 'Ann'}, record_id='p1')

        method, url = self.session.request.call_args[0]
        self.assertEqual((method, url), ('PUT', 'http://store.local/tables/patients/p1'))

    def test_upsert_without_id_posts(self):
        self.session.request.return_value = _response(payload={'id': 'p2'})

        self.client_.upsert('patients', {'first_name': 'Ann'}, record_id=None)

        self.assertEqual(self.session.request.call_args[0][0], 'POST')

    def test_delete_ignores_body(self):
        response = _response(status=204, content=b'')
        self.session.request.return_value = response

        self.assertIsNone(self.client_.delete('vitals', 'v1'))
        response.json.assert_not_called()

    def test_error_status_raises_response_error(self):
        self.session.request.return_value = _response(status=500, text='boom')

        with self.assertRaises(TableStoreResponseError) as ctx:
            self.client_.delete('patients', 'p1')

        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.body, 'boom')
        self.assertEqual(
            ctx.exception.to_dict(),
            {
                'detail': 'DELETE http://store.local/tables/patients/p1 returned 500',
                'resource': 'patients',
                'record_id': 'p1',
                'status_code': 500,
            },
        )

    def test_connection_error_raises_unavailable(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError('refused')
        with self.assertRaises(TableStoreUnavailable):
            self.client_.list('patients')

    def test_timeout_raises_unavailable(self):
        self.session.request.side_effect = requests.exceptions.Timeout()
        with self.assertRaises(TableStoreUnavailable) as ctx:
            self.client_.list('patients')
        self.assertIn('timed out after 3s', str(ctx.exception))

    @override_settings(TABLE_STORE_URL='http://configured.local/api/', TABLE_STORE_TIMEOUT=7)
    def test_get_client_reads_settings(self):
        client = get_client()
        self.assertEqual(client.base_url, 'http://configured.local/api')
        self.assertEqual(client.timeout, 7)
