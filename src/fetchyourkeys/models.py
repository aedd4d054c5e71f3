"""Pydantic models for key records, cache envelopes and lookup results.

Storage models (what gets encrypted) are kept apart from the response models
returned by the client, which all share the success/error/metadata shape.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Fields never returned to callers
SANITIZED_FIELDS = ('metadata', 'meta')


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp used in envelopes and result metadata."""
    return datetime.now(timezone.utc).isoformat()


# Storage Models
class Key(BaseModel):
    """A secret record as returned to callers (metadata stripped)."""
    model_config = ConfigDict(extra='allow')

    id: Optional[Union[str, int]] = None
    label: str
    service: Optional[str] = None
    value: Optional[str] = None
    is_active: Optional[bool] = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator('value', mode='before')
    @classmethod
    def _stringify_value(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def sanitize(cls, record: Dict[str, Any]) -> 'Key':
        """Build a Key from a raw cached record, dropping metadata."""
        clean = {k: v for k, v in record.items() if k not in SANITIZED_FIELDS}
        return cls.model_validate(clean)


class CacheEnvelope(BaseModel):
    """Plaintext form of the persisted cache before encryption."""
    signature: str
    data: Dict[str, Dict[str, Any]] = {}
    timestamp: str = Field(default_factory=utc_timestamp)


# Response Meta Models
class ErrorInfo(BaseModel):
    """Error information in results."""
    code: str
    message: str
    suggestion: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ResultMeta(BaseModel):
    """Metadata attached to every lookup result."""
    cached: bool = False
    online: bool = False
    timestamp: str = Field(default_factory=utc_timestamp)


class Result(BaseModel):
    """Common shape of every client result."""
    success: bool
    error: Optional[ErrorInfo] = None
    metadata: Optional[ResultMeta] = None


class KeyResult(Result):
    """Result of get()."""
    data: Optional[Key] = None


class MultipleKeysResult(Result):
    """Result of get_multiple(); absent labels map to None."""
    data: Optional[Dict[str, Optional[Key]]] = None


class RefreshResult(Result):
    """Result of refresh()."""
    data: Optional[bool] = None


# Initialization
class InitState(str, Enum):
    """Settled state of the one-shot initialization pass."""
    PENDING = 'pending'
    ONLINE_VALID = 'online-valid'
    OFFLINE_WITH_CACHE = 'offline-with-cache'
    OFFLINE_EMPTY = 'offline-empty'
    ERROR_UNAUTHORIZED = 'error-unauthorized'
    ERROR_FORBIDDEN = 'error-forbidden'
    ERROR_NETWORK = 'error-network'

    @property
    def is_auth_error(self) -> bool:
        return self in (InitState.ERROR_UNAUTHORIZED, InitState.ERROR_FORBIDDEN)


class InitializationResult(BaseModel):
    """Outcome of the initialization pass: a state plus an optional error."""
    state: InitState
    error: Optional[ErrorInfo] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CacheStats(BaseModel):
    """Snapshot returned by FetchYourKeys.get_stats()."""
    cached_keys: int
    is_online: bool
    environment: str
    cache_type: str
    cache_valid: bool
    cache_id: str
    api_key: str
    status: str
    state: InitState
    error: Optional[ErrorInfo] = None
    debug_enabled: bool = False
    silent_mode: bool = False


class LogEntry(BaseModel):
    """One record captured by the debug log history."""
    timestamp: str
    level: str
    message: str
    logger: Optional[str] = None

