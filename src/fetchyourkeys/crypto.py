"""
Credential-derived key material and AES-256-GCM envelope encryption.

Every value here is a pure function of the credential and a fixed purpose salt,
so two components built from the same credential agree on cache identity
without the raw credential ever being stored next to cached data.

Ciphertext format: hex(iv) ":" hex(tag) ":" hex(ciphertext), with a 16-byte
random IV and the 16-byte GCM authentication tag.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import NamedTuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from .exceptions import SecurityError

logger = logging.getLogger(__name__)

# scrypt cost parameters
SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1

KEY_LENGTH = 32
SIGNATURE_LENGTH = 16
CACHE_ID_LENGTH = 16
IV_LENGTH = 16
TAG_LENGTH = 16


class PurposeSalts(NamedTuple):
    """One salt per derived value."""
    encryption: bytes
    signature: bytes
    cache_id: bytes


DISK_SALTS = PurposeSalts(
    encryption=b'fetchyourkeys-disk-cache-v2',
    signature=b'disk-cache-signature-v2',
    cache_id=b'cache-id-salt-v2',
)

MEMORY_SALTS = PurposeSalts(
    encryption=b'fetchyourkeys-memory-cache-v2',
    signature=b'memory-cache-signature-v2',
    cache_id=b'memory-cache-id-v2',
)


@dataclass(frozen=True)
class CredentialMaterial:
    """Values derived from one credential for one backend."""
    encryption_key: bytes
    signature: str
    cache_id: str

    def __repr__(self) -> str:
        return f"CredentialMaterial(cache_id={self.cache_id!r})"


def derive_key(credential: str, purpose_salt: bytes, length: int = KEY_LENGTH) -> bytes:
    """Derive key bytes from a credential using scrypt."""
    kdf = Scrypt(salt=purpose_salt, length=length, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
    return kdf.derive(credential.encode('utf-8'))


def derive_signature(credential: str, salts: PurposeSalts) -> str:
    """Ownership signature for a credential, hex encoded."""
    return derive_key(credential, salts.signature, SIGNATURE_LENGTH).hex()


def derive_material(credential: str, salts: PurposeSalts) -> CredentialMaterial:
    """Derive the encryption key, signature and cache identifier for a credential."""
    return CredentialMaterial(
        encryption_key=derive_key(credential, salts.encryption, KEY_LENGTH),
        signature=derive_signature(credential, salts),
        cache_id=derive_key(credential, salts.cache_id, CACHE_ID_LENGTH).hex(),
    )


def signatures_match(expected: str, actual: str) -> bool:
    return secrets.compare_digest(expected.encode(), actual.encode())


def mask_credential(credential: str) -> str:
    """Mask a credential for logs and error details."""
    if not credential or len(credential) <= 8:
        return '***'
    return credential[:4] + '***' + credential[-4:]


def encrypt(plaintext: str, key: bytes) -> str:
    """Encrypt plaintext with AES-256-GCM. Returns iv:tag:ciphertext in hex."""
    try:
        iv = secrets.token_bytes(IV_LENGTH)
        sealed = AESGCM(key).encrypt(iv, plaintext.encode('utf-8'), None)
    except (ValueError, TypeError) as e:
        logger.error(f"Encryption failed: {e}")
        raise SecurityError('Failed to encrypt cache data') from e
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
    return ':'.join((iv.hex(), tag.hex(), ciphertext.hex()))


def decrypt(payload: str, key: bytes) -> str:
    """Decrypt an iv:tag:ciphertext hex payload back to plaintext."""
    try:
        parts = payload.strip().split(':')
        if len(parts) != 3:
            raise ValueError('Invalid payload format')
        iv, tag, ciphertext = (bytes.fromhex(part) for part in parts)
        if len(iv) != IV_LENGTH or len(tag) != TAG_LENGTH:
            raise ValueError('Invalid IV or tag length')
        plaintext = AESGCM(key).decrypt(iv, ciphertext + tag, None)
        return plaintext.decode('utf-8')
    except (InvalidTag, ValueError, TypeError) as e:
        logger.debug(f"Decryption failed: {type(e).__name__}")
        raise SecurityError('Failed to decrypt cache data') from e
