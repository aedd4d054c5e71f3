"""
Secure caches for fetched key records.

Provides an encrypted disk cache for development and a shared encrypted
memory cache for production, both bound to the API key that created them.
"""

from .interface import SecureCache
from .disk import SecureDiskCache
from .memory import SecureMemoryCache, MemoryCacheRegistry
from .factory import create_cache, validate_credential

__all__ = [
    # Interface
    'SecureCache',

    # Implementations
    'SecureDiskCache',
    'SecureMemoryCache',
    'MemoryCacheRegistry',

    # Factory
    'create_cache',
    'validate_credential',
]
