"""
Encrypted on-disk cache.

The whole entry set is persisted as one encrypted CacheEnvelope per credential
at <cache-dir>/fetchyourkeys/cache-<cacheId>.dat and rewritten after every
mutation.
"""

import logging
import os
import sys
import tempfile
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..crypto import DISK_SALTS, decrypt, derive_material, encrypt, mask_credential, signatures_match
from ..exceptions import CacheError, SecurityError
from ..models import CacheEnvelope
from .interface import Record, SecureCache

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = 'fetchyourkeys'


def default_cache_root() -> Path:
    """Platform user cache directory."""
    if os.getenv('FYK_CACHE_DIR'):
        return Path(os.environ['FYK_CACHE_DIR'])
    if os.getenv('APPDATA'):
        return Path(os.environ['APPDATA'])
    if sys.platform == 'darwin':
        return Path.home() / 'Library' / 'Caches'
    return Path(os.getenv('XDG_CACHE_HOME') or Path.home() / '.cache')


class SecureDiskCache(SecureCache):
    """Write-through cache persisted as an encrypted envelope."""

    salts = DISK_SALTS

    def __init__(self, credential: str, cache_root: Optional[Path] = None):
        """Derive key material, prepare the cache directory and load any existing file.

        Args:
            credential: API key the cache belongs to
            cache_root: Base directory (defaults to the platform cache directory)

        Raises:
            CacheError: If the cache directory cannot be created
        """
        super().__init__(derive_material(credential, self.salts))
        self._entries: Dict[str, Record] = {}
        self._lock = threading.RLock()
        root = Path(cache_root) if cache_root else default_cache_root()
        self.cache_file = root / CACHE_DIR_NAME / f"cache-{self.get_cache_id()}.dat"

        logger.debug(f"Initializing disk cache for API key {mask_credential(credential)}")
        self._ensure_cache_directory()
        self._load_from_disk()

    @property
    def cache_type(self) -> str:
        return "disk"

    def _ensure_cache_directory(self) -> None:
        cache_dir = self.cache_file.parent
        if cache_dir.is_dir():
            return
        try:
            cache_dir.mkdir(parents=True, mode=0o700, exist_ok=True)
            cache_dir.chmod(0o700)
            logger.debug(f"Created cache directory {cache_dir}")
        except OSError as e:
            logger.error(f"Cannot create cache directory {cache_dir}: {e}")
            raise CacheError('Cannot access the disk cache', details={'path': str(cache_dir)}) from e

    def _load_from_disk(self) -> None:
        """Load the envelope; anything unreadable or foreign leaves the cache empty."""
        if not self.cache_file.exists():
            logger.debug("No existing cache file")
            return
        try:
            payload = self.cache_file.read_text(encoding='utf-8')
            if not payload.strip():
                logger.debug("Cache file is empty")
                return
            envelope = CacheEnvelope.model_validate_json(decrypt(payload, self._material.encryption_key))
        except (OSError, SecurityError, ValidationError, UnicodeDecodeError) as e:
            logger.warning(f"Discarding unreadable cache file: {type(e).__name__}")
            self.clear()
            return

        if not signatures_match(envelope.signature, self._material.signature):
            logger.warning("Cache file belongs to a different API key, discarding")
            self.clear()
            return

        self._entries = dict(envelope.data)
        logger.debug(f"Loaded {len(self._entries)} keys from {self.cache_file}")

    def _save_to_disk(self, entries: Dict[str, Record]) -> None:
        """Encrypt the full entry map and atomically replace the cache file."""
        envelope = CacheEnvelope(signature=self._material.signature, data=entries)
        payload = encrypt(envelope.model_dump_json(), self._material.encryption_key)

        fd, tmp_path = tempfile.mkstemp(dir=self.cache_file.parent, prefix='.cache-', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.cache_file)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _commit(self, entries: Dict[str, Record]) -> None:
        try:
            self._save_to_disk(entries)
        except (OSError, SecurityError) as e:
            logger.error(f"Failed to save cache to {self.cache_file}: {e}")
            raise CacheError('Failed to persist the disk cache', details={'path': str(self.cache_file)}) from e
        self._entries = entries

    def set(self, label: str, record: Record) -> None:
        with self._lock:
            entries = dict(self._entries)
            entries[label] = record
            self._commit(entries)

    def get(self, label: str) -> Optional[Record]:
        return self._entries.get(label)

    def has(self, label: str) -> bool:
        return label in self._entries

    def delete(self, label: str) -> bool:
        with self._lock:
            if label not in self._entries:
                return False
            entries = dict(self._entries)
            del entries[label]
            self._commit(entries)
            return True

    def keys(self) -> List[str]:
        return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries = {}
            try:
                if self.cache_file.exists():
                    self.cache_file.write_text('', encoding='utf-8')
            except OSError as e:
                logger.error(f"Failed to truncate cache file {self.cache_file}: {e}")

    def size(self) -> int:
        return len(self._entries)

    def replace_all(self, records: Iterable[Record]) -> int:
        staged = self.stage(records)
        with self._lock:
            try:
                self._commit(staged)
            except CacheError:
                logger.warning("Disk cache not persisted, serving fetched keys from memory")
                self._entries = staged
                return len(staged)
        logger.debug(f"Committed {len(staged)} keys to {self.cache_file}")
        return len(staged)
