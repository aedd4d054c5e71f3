"""
Clients for the FetchYourKeys keys endpoint.
"""

from .base_client import KeysClient
from .in_memory_client import InMemoryKeysClient
from .remote_client import RemoteKeysClient
from .response import APIResponse

__all__ = [
    'KeysClient',
    'InMemoryKeysClient',
    'RemoteKeysClient',
    'APIResponse'
]
