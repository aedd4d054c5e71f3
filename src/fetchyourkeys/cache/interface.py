"""
Abstract interface for secure caches.

Defines the contract shared by the disk and memory implementations.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..crypto import CredentialMaterial, PurposeSalts, derive_signature, signatures_match
from ..models import Key

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class SecureCache(ABC):
    """Abstract base class for label -> record caches bound to one credential.

    Implementations derive their key material at construction time and must
    never keep the raw credential.
    """

    salts: PurposeSalts

    def __init__(self, material: CredentialMaterial):
        self._material = material

    @abstractmethod
    def set(self, label: str, record: Record) -> None:
        """Insert or replace a record."""
        pass

    @abstractmethod
    def get(self, label: str) -> Optional[Record]:
        """Get a record by label, None if absent."""
        pass

    @abstractmethod
    def has(self, label: str) -> bool:
        pass

    @abstractmethod
    def delete(self, label: str) -> bool:
        """Remove a record.

        Returns:
            True if an entry existed and was removed
        """
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """Snapshot of the cached labels."""
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def size(self) -> int:
        pass

    @abstractmethod
    def replace_all(self, records: Iterable[Record]) -> int:
        """Replace the whole entry set with records in one commit.

        Records without a label are skipped.

        Returns:
            Number of entries stored
        """
        pass

    @property
    @abstractmethod
    def cache_type(self) -> str:
        """Return the type of cache (e.g., 'disk', 'memory')."""
        pass

    def get_cache_id(self) -> str:
        return self._material.cache_id

    def is_valid_for_api_key(self, credential: str) -> bool:
        """Check whether this cache was created for credential."""
        if not credential:
            return False
        return self.matches_signature(derive_signature(credential, self.salts))

    def matches_signature(self, signature: str) -> bool:
        """Compare a signature derived with this cache's salts against its own."""
        return signatures_match(signature, self._material.signature)

    @staticmethod
    def stage(records: Iterable[Record]) -> Dict[str, Record]:
        """Build a label -> record map, skipping records without a label or
        that cannot be returned as a Key.
        """
        staged = {}
        for record in records:
            if not isinstance(record, dict) or not record.get('label'):
                continue
            try:
                Key.sanitize(record)
            except ValidationError as e:
                logger.warning(f"Skipping malformed key record {record.get('id')!r}: {e.error_count()} invalid fields")
                continue
            staged[record['label']] = record
        return staged
