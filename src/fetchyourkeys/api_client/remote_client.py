"""
Remote HTTP keys client using requests library.
"""
import logging
from typing import Optional

import requests

from ..config.settings import DEFAULT_TIMEOUT
from ..crypto import mask_credential
from ..exceptions import TransportError
from .base_client import FYK_HEADER, KeysClient
from .response import APIResponse

logger = logging.getLogger(__name__)


class RemoteKeysClient(KeysClient):
    """Fetches key records from the FetchYourKeys API."""

    def __init__(self, base_url, api_key, timeout=DEFAULT_TIMEOUT):
        """Initialize with base URL and credential.

        Args:
            base_url: Keys endpoint (e.g., https://apifetchyourkeys.vercel.app/v1/keys)
            api_key: Credential sent in the x-fyk-key header
            timeout: Request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout
        self._api_key = api_key

    def __repr__(self):
        return f"RemoteKeysClient({self.base_url!r}, api_key={mask_credential(self._api_key)!r})"

    def fetch_keys(self, timeout: Optional[float] = None) -> APIResponse:
        """Make GET request over HTTP."""
        headers = {FYK_HEADER: self._api_key}
        try:
            response = requests.get(self.base_url, headers=headers, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            logger.debug(f"Request to {self.base_url} failed: {type(e).__name__}")
            raise TransportError(
                f"Cannot reach {self.base_url}: {type(e).__name__}",
                details={'url': self.base_url},
            ) from e

        try:
            data = response.json()
        except ValueError:
            data = response.text

        return APIResponse(
            status_code=response.status_code,
            data=data,
            headers=dict(response.headers),
            url=self.base_url,
        )
