"""Cache factory with environment-driven selection.

Development uses the encrypted disk cache, production the shared memory cache.
A disk cache that cannot be built falls back to memory.
"""

import logging
from pathlib import Path
from typing import Optional

from ..config.settings import PROD, normalize_environment
from ..exceptions import InvalidCredentialError, MissingCredentialError
from .disk import SecureDiskCache
from .interface import SecureCache
from .memory import MemoryCacheRegistry

logger = logging.getLogger(__name__)

MIN_CREDENTIAL_LENGTH = 10


def validate_credential(credential: Optional[str]) -> str:
    """Reject missing or obviously malformed credentials.

    Raises:
        MissingCredentialError: If no credential is given
        InvalidCredentialError: If the credential is too short
    """
    if not credential:
        raise MissingCredentialError(
            'API key is missing',
            details={'example': 'FetchYourKeys(api_key="your-key")'},
        )
    if len(credential) < MIN_CREDENTIAL_LENGTH:
        raise InvalidCredentialError(
            'API key is invalid',
            details={'minLength': MIN_CREDENTIAL_LENGTH},
        )
    return credential


def create_cache(credential: str, environment: Optional[str] = None,
                 registry: Optional[MemoryCacheRegistry] = None,
                 cache_dir: Optional[Path] = None) -> SecureCache:
    """Create the cache backend for a credential.

    Args:
        credential: API key the cache is bound to
        environment: 'dev' (disk) or 'prod' (memory); unknown values become 'dev'
        registry: Registry owning shared memory caches (a private one if omitted)
        cache_dir: Base directory for the disk cache

    Returns:
        A SecureCache bound to credential
    """
    validate_credential(credential)
    environment = normalize_environment(environment)
    if registry is None:
        registry = MemoryCacheRegistry()

    if environment == PROD:
        logger.debug("Prod mode: memory cache")
        return registry.get_or_create(credential)

    logger.debug("Dev mode: disk cache")
    try:
        return SecureDiskCache(credential, cache_root=cache_dir)
    except Exception as e:
        logger.warning(f"Disk cache unavailable, falling back to memory: {e}")
        return registry.get_or_create(credential)
