"""
Exception classes and error codes with built-in guidance.

Construction-time misconfiguration is raised; everything else is converted to
an ErrorInfo and returned inside a result.
"""
from enum import Enum
from typing import Any, Dict, Optional

from .models import ErrorInfo


class ErrorCode(str, Enum):
    """Codes carried by ErrorInfo.code."""
    MISSING_CREDENTIAL = 'MISSING_CREDENTIAL'
    INVALID_CREDENTIAL = 'INVALID_CREDENTIAL'
    UNAUTHORIZED = 'UNAUTHORIZED'
    FORBIDDEN = 'FORBIDDEN'
    NETWORK_ERROR = 'NETWORK_ERROR'
    CACHE_INVALID = 'CACHE_INVALID'
    KEY_NOT_FOUND = 'KEY_NOT_FOUND'
    CACHE_ERROR = 'CACHE_ERROR'
    SECURITY_ERROR = 'SECURITY_ERROR'
    NOT_FOUND = 'NOT_FOUND'
    RATE_LIMIT = 'RATE_LIMIT'
    SERVER_ERROR = 'SERVER_ERROR'
    REFRESH_FAILED = 'REFRESH_FAILED'


DASHBOARD_URL = 'https://fetchyourkeys.vercel.app'


class FetchYourKeysError(Exception):
    """Base exception for all client errors."""

    default_code = ErrorCode.NETWORK_ERROR
    default_suggestion = 'Check your configuration and try again'

    def __init__(self, message: str, code: Optional[str] = None,
                 suggestion: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = str(code.value if isinstance(code, ErrorCode) else code or self.default_code.value)
        self.suggestion = suggestion or self.default_suggestion
        self.details = details or {}

    @property
    def guidance(self) -> str:
        return f"{self.code}: {self.message}\nHint: {self.suggestion}"

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            code=self.code,
            message=self.message,
            suggestion=self.suggestion,
            details=self.details or None,
        )


class MissingCredentialError(FetchYourKeysError):
    """Raised when no API key was passed and FYK_SECRET_KEY is unset."""
    default_code = ErrorCode.MISSING_CREDENTIAL
    default_suggestion = 'Set FYK_SECRET_KEY in the environment or pass api_key to FetchYourKeys()'


class InvalidCredentialError(FetchYourKeysError):
    """Raised when the API key is obviously malformed (too short)."""
    default_code = ErrorCode.INVALID_CREDENTIAL
    default_suggestion = 'Check that your API key was copied in full'


class CacheError(FetchYourKeysError):
    """Raised when the cache storage cannot be used."""
    default_code = ErrorCode.CACHE_ERROR
    default_suggestion = 'Check permissions on the cache directory or use the prod environment'


class SecurityError(FetchYourKeysError):
    """Raised when encrypting or decrypting cache contents fails."""
    default_code = ErrorCode.SECURITY_ERROR
    default_suggestion = 'The cache will be rebuilt from the remote service'


class TransportError(FetchYourKeysError):
    """Raised when the remote endpoint cannot be reached at all."""
    default_code = ErrorCode.NETWORK_ERROR
    default_suggestion = 'Check your internet connection'


# Display table for remote failures
_HTTP_ERRORS = {
    401: (ErrorCode.UNAUTHORIZED, 'FetchYourKeys API key is invalid or expired',
          f'Check that FYK_SECRET_KEY is correct and active on {DASHBOARD_URL}'),
    403: (ErrorCode.FORBIDDEN, 'Access denied for this API key',
          'This API key lacks the required permissions. Generate a new key from your dashboard'),
    404: (ErrorCode.NOT_FOUND, 'API endpoint not found',
          'Check that the base URL is correct'),
    429: (ErrorCode.RATE_LIMIT, 'Request limit reached',
          'Wait a moment before trying again'),
    500: (ErrorCode.SERVER_ERROR, 'FetchYourKeys server error',
          'Try again shortly. If the problem persists, contact support'),
}


def map_http_error(status: Optional[int], message: Optional[str] = None,
                   masked_key: Optional[str] = None, url: Optional[str] = None) -> ErrorInfo:
    """Convert a remote failure into a displayable ErrorInfo.

    Args:
        status: HTTP status code, or None when no response was received
        message: Underlying error message, used for unmapped failures
        masked_key: Masked credential to include in details
        url: Requested URL

    Returns:
        ErrorInfo with code, message, suggestion and diagnostic details
    """
    if status in _HTTP_ERRORS:
        code, text, suggestion = _HTTP_ERRORS[status]
    else:
        code, text, suggestion = (ErrorCode.NETWORK_ERROR,
                                  message or 'Network connection error',
                                  'Check your internet connection')
    return ErrorInfo(
        code=code.value,
        message=text,
        suggestion=suggestion,
        details={'status': status, 'apiKey': masked_key, 'url': url},
    )
