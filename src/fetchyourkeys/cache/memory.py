"""
Encrypted in-process cache and the registry that shares it.

Records are held as AES-GCM ciphertext under the credential-derived key. The
registry hands out one instance per cache identifier so several clients using
the same API key share a warm cache.
"""

import json
import logging
import threading
from typing import Dict, Iterable, List, Optional

from ..crypto import MEMORY_SALTS, decrypt, derive_material, encrypt, mask_credential
from .interface import Record, SecureCache

logger = logging.getLogger(__name__)


class SecureMemoryCache(SecureCache):
    """Non-persistent cache; contents are lost when the process exits."""

    salts = MEMORY_SALTS

    def __init__(self, credential: str):
        super().__init__(derive_material(credential, self.salts))
        self._entries: Dict[str, str] = {}
        self._lock = threading.RLock()
        logger.debug(f"Initializing memory cache for API key {mask_credential(credential)}")

    @property
    def cache_type(self) -> str:
        return "memory"

    def _seal(self, record: Record) -> str:
        return encrypt(json.dumps(record), self._material.encryption_key)

    def set(self, label: str, record: Record) -> None:
        sealed = self._seal(record)
        with self._lock:
            self._entries[label] = sealed

    def get(self, label: str) -> Optional[Record]:
        sealed = self._entries.get(label)
        if sealed is None:
            return None
        return json.loads(decrypt(sealed, self._material.encryption_key))

    def has(self, label: str) -> bool:
        return label in self._entries

    def delete(self, label: str) -> bool:
        with self._lock:
            return self._entries.pop(label, None) is not None

    def keys(self) -> List[str]:
        return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries = {}

    def size(self) -> int:
        return len(self._entries)

    def replace_all(self, records: Iterable[Record]) -> int:
        staged = {label: self._seal(record) for label, record in self.stage(records).items()}
        with self._lock:
            self._entries = staged
        return len(staged)


class MemoryCacheRegistry:
    """Owns the shared memory caches of one application, keyed by cache identifier.

    Create one at the application's composition root and pass it to every
    client that should share warm caches.
    """

    def __init__(self):
        self._instances: Dict[str, SecureMemoryCache] = {}
        self._lock = threading.Lock()

    def get_or_create(self, credential: str) -> SecureMemoryCache:
        """Return the cache for credential, building it on first use.

        An existing instance that fails the ownership check is discarded and
        rebuilt.
        """
        candidate = SecureMemoryCache(credential)
        cache_id = candidate.get_cache_id()
        with self._lock:
            existing = self._instances.get(cache_id)
            if existing is not None:
                if existing.is_valid_for_api_key(credential):
                    logger.debug(f"Reusing memory cache {cache_id[:8]}")
                    return existing
                logger.warning(f"Memory cache {cache_id[:8]} failed ownership check, rebuilding")
            self._instances[cache_id] = candidate
            return candidate

    def discard(self, cache_id: str) -> bool:
        with self._lock:
            return self._instances.pop(cache_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._instances.clear()

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, cache_id: str) -> bool:
        return cache_id in self._instances
