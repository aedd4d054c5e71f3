"""Tests for the HTTP keys client and the response wrapper."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from fetchyourkeys.api_client import APIResponse, RemoteKeysClient
from fetchyourkeys.api_client.base_client import FYK_HEADER
from fetchyourkeys.exceptions import TransportError
from ..base import API_KEY

BASE_URL = 'https://keys.example.test/v1/keys'


def fake_response(status_code=200, payload=None, text=''):
    response = MagicMock()
    response.status_code = status_code
    response.headers = {'content-type': 'application/json'}
    response.text = text
    if payload is None:
        response.json.side_effect = ValueError('not json')
    else:
        response.json.return_value = payload
    return response


class TestRemoteKeysClient(unittest.TestCase):

    def setUp(self):
        self.client = RemoteKeysClient(BASE_URL, API_KEY, timeout=7.0)

    @patch('fetchyourkeys.api_client.remote_client.requests.get')
    def test_sends_credential_header(self, mock_get):
        mock_get.return_value = fake_response(payload={'success': True, 'data': []})
        response = self.client.fetch_keys()

        mock_get.assert_called_once_with(BASE_URL, headers={FYK_HEADER: API_KEY}, timeout=7.0)
        self.assertTrue(response.ok)
        self.assertEqual(response.records(), [])
        self.assertEqual(response.url, BASE_URL)

    @patch('fetchyourkeys.api_client.remote_client.requests.get')
    def test_timeout_override(self, mock_get):
        mock_get.return_value = fake_response(payload={'data': []})
        self.client.fetch_keys(timeout=5.0)
        self.assertEqual(mock_get.call_args.kwargs['timeout'], 5.0)

    @patch('fetchyourkeys.api_client.remote_client.requests.get')
    def test_error_status_is_returned(self, mock_get):
        mock_get.return_value = fake_response(401, payload={'success': False, 'error': 'Unauthorized'})
        response = self.client.fetch_keys()
        self.assertFalse(response.ok)
        self.assertEqual(response.status_code, 401)
        self.assertIsNone(response.records())

    @patch('fetchyourkeys.api_client.remote_client.requests.get')
    def test_non_json_body_kept_as_text(self, mock_get):
        mock_get.return_value = fake_response(502, text='Bad Gateway')
        response = self.client.fetch_keys()
        self.assertEqual(response.data, 'Bad Gateway')
        self.assertIsNone(response.records())

    @patch('fetchyourkeys.api_client.remote_client.requests.get')
    def test_transport_failure(self, mock_get):
        mock_get.side_effect = requests.Timeout('timed out')
        with self.assertRaises(TransportError) as ctx:
            self.client.fetch_keys()
        self.assertEqual(ctx.exception.code, 'NETWORK_ERROR')
        self.assertNotIn(API_KEY, ctx.exception.message)

    def test_repr_masks_credential(self):
        self.assertNotIn(API_KEY, repr(self.client))


class TestAPIResponseRecords(unittest.TestCase):

    def test_wrapped_list(self):
        response = APIResponse(200, {'success': True, 'data': [{'label': 'a'}], 'count': 1})
        self.assertEqual(response.records(), [{'label': 'a'}])

    def test_bare_data(self):
        self.assertEqual(APIResponse(200, {'data': []}).records(), [])

    def test_malformed_bodies(self):
        for body in ('text', [], {'success': True}, {'data': {'label': 'a'}}, {'success': False, 'data': []}):
            with self.subTest(body=body):
                self.assertIsNone(APIResponse(200, body).records())
