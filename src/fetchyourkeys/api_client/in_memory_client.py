"""
In-memory keys client serving canned responses.

Used by tests and offline demos; no network access.
"""
from typing import Any, Dict, List, Optional

from ..exceptions import TransportError
from .base_client import KeysClient
from .response import APIResponse


class InMemoryKeysClient(KeysClient):
    """Returns a fixed response, or raises TransportError when offline."""

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None,
                 status_code: int = 200, body: Any = None, offline: bool = False):
        """Initialize with canned data.

        Args:
            records: Key records served as {"success": true, "data": records}
            status_code: HTTP status to report
            body: Raw body overriding records
            offline: Simulate an unreachable endpoint
        """
        self.records = records or []
        self.status_code = status_code
        self.body = body
        self.offline = offline
        self.calls = 0

    def fetch_keys(self, timeout: Optional[float] = None) -> APIResponse:
        self.calls += 1
        if self.offline:
            raise TransportError('Simulated network failure')
        data = self.body if self.body is not None else {
            'success': True,
            'data': list(self.records),
            'count': len(self.records),
        }
        return APIResponse(status_code=self.status_code, data=data, url='memory://keys')
