"""Tests for credential-derived key material and envelope encryption."""

import secrets
import unittest

from fetchyourkeys.crypto import (
    DISK_SALTS,
    MEMORY_SALTS,
    decrypt,
    derive_key,
    derive_material,
    encrypt,
    mask_credential,
)
from fetchyourkeys.exceptions import SecurityError
from .base import API_KEY, OTHER_API_KEY


class TestKeyDerivation(unittest.TestCase):

    def test_same_credential_same_material(self):
        first = derive_material(API_KEY, DISK_SALTS)
        second = derive_material(API_KEY, DISK_SALTS)
        self.assertEqual(first, second)

    def test_different_credentials_differ(self):
        a = derive_material(API_KEY, DISK_SALTS)
        b = derive_material(OTHER_API_KEY, DISK_SALTS)
        self.assertNotEqual(a.encryption_key, b.encryption_key)
        self.assertNotEqual(a.signature, b.signature)
        self.assertNotEqual(a.cache_id, b.cache_id)

    def test_purposes_are_independent(self):
        material = derive_material(API_KEY, DISK_SALTS)
        self.assertEqual(len(material.encryption_key), 32)
        self.assertEqual(len(material.signature), 32)  # 16 bytes, hex
        self.assertEqual(len(material.cache_id), 32)
        self.assertNotEqual(material.signature, material.cache_id)
        self.assertFalse(material.encryption_key.hex().startswith(material.signature))

    def test_disk_and_memory_salts_differ(self):
        disk = derive_material(API_KEY, DISK_SALTS)
        memory = derive_material(API_KEY, MEMORY_SALTS)
        self.assertNotEqual(disk.cache_id, memory.cache_id)
        self.assertNotEqual(disk.signature, memory.signature)

    def test_derive_key_length(self):
        self.assertEqual(len(derive_key(API_KEY, b'salt', 16)), 16)

    def test_repr_hides_key_material(self):
        material = derive_material(API_KEY, DISK_SALTS)
        self.assertNotIn(material.signature, repr(material))
        self.assertNotIn(API_KEY, repr(material))


class TestMaskCredential(unittest.TestCase):

    def test_short_credentials_fully_masked(self):
        self.assertEqual(mask_credential("abc"), "***")
        self.assertEqual(mask_credential("12345678"), "***")
        self.assertEqual(mask_credential(""), "***")

    def test_long_credential(self):
        self.assertEqual(mask_credential(API_KEY), "fk_t***7890")


class TestEncryptDecrypt(unittest.TestCase):

    def setUp(self):
        self.key = secrets.token_bytes(32)

    def test_roundtrip(self):
        plaintext = '{"signature": "abc", "data": {}}'
        self.assertEqual(decrypt(encrypt(plaintext, self.key), self.key), plaintext)

    def test_payload_format(self):
        iv, tag, ciphertext = encrypt("secret", self.key).split(':')
        self.assertEqual(len(bytes.fromhex(iv)), 16)
        self.assertEqual(len(bytes.fromhex(tag)), 16)
        self.assertEqual(len(bytes.fromhex(ciphertext)), len("secret"))

    def test_random_iv(self):
        self.assertNotEqual(encrypt("same", self.key), encrypt("same", self.key))

    def test_wrong_key_fails(self):
        payload = encrypt("secret", self.key)
        with self.assertRaises(SecurityError):
            decrypt(payload, secrets.token_bytes(32))

    def test_tampered_ciphertext_fails(self):
        iv, tag, ciphertext = encrypt("secret value", self.key).split(':')
        flipped = format(int(ciphertext[:2], 16) ^ 0x01, '02x') + ciphertext[2:]
        with self.assertRaises(SecurityError):
            decrypt(':'.join((iv, tag, flipped)), self.key)

    def test_malformed_payloads_fail(self):
        for payload in ("", "not-hex", "aa:bb", "zz:zz:zz", "00:00:00"):
            with self.subTest(payload=payload):
                with self.assertRaises(SecurityError):
                    decrypt(payload, self.key)
