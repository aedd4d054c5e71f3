"""
FetchYourKeys client library.

Fetches API-key records from FetchYourKeys, keeps them in an encrypted cache
bound to your API key and serves lookups online or offline.
"""

from .client import FetchYourKeys
from .cache import MemoryCacheRegistry, SecureCache, SecureDiskCache, SecureMemoryCache, create_cache
from .exceptions import (
    ErrorCode,
    FetchYourKeysError,
    MissingCredentialError,
    InvalidCredentialError,
    CacheError,
    SecurityError,
    TransportError,
)
from .models import (
    Key,
    ErrorInfo,
    ResultMeta,
    KeyResult,
    MultipleKeysResult,
    RefreshResult,
    InitState,
    InitializationResult,
    CacheStats,
)

__version__ = '0.1.0'

__all__ = [
    # Client
    'FetchYourKeys',

    # Caches
    'SecureCache',
    'SecureDiskCache',
    'SecureMemoryCache',
    'MemoryCacheRegistry',
    'create_cache',

    # Errors
    'ErrorCode',
    'FetchYourKeysError',
    'MissingCredentialError',
    'InvalidCredentialError',
    'CacheError',
    'SecurityError',
    'TransportError',

    # Models
    'Key',
    'ErrorInfo',
    'ResultMeta',
    'KeyResult',
    'MultipleKeysResult',
    'RefreshResult',
    'InitState',
    'InitializationResult',
    'CacheStats',
]
