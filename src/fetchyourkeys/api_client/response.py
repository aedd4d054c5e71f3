"""
Generic API response wrapper for keys clients.

Provides consistent interface regardless of underlying HTTP library.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class APIResponse:
    """Unified response wrapper for both in-memory and HTTP keys clients."""
    status_code: int
    data: Any
    headers: Dict[str, str] = field(default_factory=dict)
    url: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def records(self) -> Optional[List[Dict[str, Any]]]:
        """Key records from the body, or None if the body is malformed.

        Accepts both {"success": true, "data": [...]} and a bare {"data": [...]}.
        """
        if not isinstance(self.data, dict):
            return None
        if self.data.get('success') is False:
            return None
        records = self.data.get('data')
        if not isinstance(records, list):
            return None
        return records
