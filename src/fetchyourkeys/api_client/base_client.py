"""
Base keys client abstract class.

Provides consistent interface regardless of whether keys come over HTTP or
from canned data.
"""
from abc import ABC, abstractmethod
from typing import Optional

from .response import APIResponse

FYK_HEADER = 'x-fyk-key'


class KeysClient(ABC):
    """Abstract base class for clients of the keys endpoint."""

    @abstractmethod
    def fetch_keys(self, timeout: Optional[float] = None) -> APIResponse:
        """GET the key list for the configured API key.

        Raises:
            TransportError: If no response could be obtained
        """
        pass
