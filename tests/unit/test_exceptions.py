"""Tests for error codes and remote failure mapping."""

import unittest

from fetchyourkeys.exceptions import (
    CacheError, ErrorCode, FetchYourKeysError, MissingCredentialError, map_http_error,
)


class TestMapHttpError(unittest.TestCase):

    def test_known_statuses(self):
        expected = {
            401: ErrorCode.UNAUTHORIZED,
            403: ErrorCode.FORBIDDEN,
            404: ErrorCode.NOT_FOUND,
            429: ErrorCode.RATE_LIMIT,
            500: ErrorCode.SERVER_ERROR,
        }
        for status, code in expected.items():
            with self.subTest(status=status):
                info = map_http_error(status, masked_key='fk_t***7890', url='https://x.test')
                self.assertEqual(info.code, code.value)
                self.assertTrue(info.suggestion)
                self.assertEqual(info.details,
                                 {'status': status, 'apiKey': 'fk_t***7890', 'url': 'https://x.test'})

    def test_unmapped_status_is_network_error(self):
        info = map_http_error(502)
        self.assertEqual(info.code, 'NETWORK_ERROR')
        self.assertEqual(info.message, 'Network connection error')

    def test_transport_message_kept(self):
        info = map_http_error(None, 'Cannot reach host')
        self.assertEqual(info.code, 'NETWORK_ERROR')
        self.assertEqual(info.message, 'Cannot reach host')
        self.assertIsNone(info.details['status'])


class TestFetchYourKeysError(unittest.TestCase):

    def test_subclass_defaults(self):
        error = MissingCredentialError('API key is missing')
        self.assertEqual(error.code, 'MISSING_CREDENTIAL')
        self.assertIn('FYK_SECRET_KEY', error.suggestion)
        self.assertIn('MISSING_CREDENTIAL: API key is missing', error.guidance)

    def test_explicit_code(self):
        error = FetchYourKeysError('boom', code=ErrorCode.CACHE_INVALID)
        self.assertEqual(error.code, 'CACHE_INVALID')

    def test_to_error_info(self):
        info = CacheError('disk full', details={'path': '/tmp/x'}).to_error_info()
        self.assertEqual(info.code, 'CACHE_ERROR')
        self.assertEqual(info.details, {'path': '/tmp/x'})
        self.assertIsNone(FetchYourKeysError('x').to_error_info().details)
