"""
One-shot initialization pass and the shared remote reload.

The pass validates the API key against the remote endpoint and loads the key
records into the cache. It runs once per client as a single asyncio task;
every lookup awaits the same task, so concurrent callers never trigger a
second fetch. The pass never raises: its outcome is an InitializationResult.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .api_client import KeysClient
from .cache import SecureCache
from .exceptions import ErrorCode, TransportError, map_http_error
from .models import ErrorInfo, InitializationResult, InitState

logger = logging.getLogger(__name__)

AUTH_REJECTIONS = {401: InitState.ERROR_UNAUTHORIZED, 403: InitState.ERROR_FORBIDDEN}


@dataclass
class FetchOutcome:
    """Result of one remote fetch-and-replace attempt."""
    loaded: Optional[int] = None
    status: Optional[int] = None
    error: Optional[ErrorInfo] = None
    reachable: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def rejected(self) -> bool:
        """The remote refused the credential itself."""
        return self.status in AUTH_REJECTIONS


class InitializationController:
    """Runs the initialization pass and owns the online flag."""

    def __init__(self, cache: SecureCache, keys_client: KeysClient,
                 verify_ownership: Callable[[], bool], masked_key: str, base_url: str):
        """
        Args:
            cache: Backend to load records into
            keys_client: Client for the keys endpoint
            verify_ownership: Returns True when cache belongs to the client's API key
            masked_key: Masked credential for error details
            base_url: Endpoint URL for error details
        """
        self._cache = cache
        self._keys_client = keys_client
        self._verify_ownership = verify_ownership
        self._masked_key = masked_key
        self._base_url = base_url
        self._task: Optional[asyncio.Task] = None
        self.result = InitializationResult(state=InitState.PENDING)
        self.is_online = False

    @property
    def settled(self) -> bool:
        return self.result.state is not InitState.PENDING

    def start(self) -> None:
        """Schedule the pass on the running loop; without one, wait() starts it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, initialization deferred to first lookup")
            return
        if self._task is None:
            self._task = loop.create_task(self._run())

    async def wait(self) -> InitializationResult:
        """Suspend until the pass has settled and return its result."""
        if self.settled:
            return self.result
        loop = asyncio.get_running_loop()
        if self._task is None or (not self._task.done() and self._task.get_loop() is not loop):
            self._task = loop.create_task(self._run())
        return await asyncio.shield(self._task)

    async def _run(self) -> InitializationResult:
        has_cached_data = self._cache.size() > 0
        try:
            outcome = await self.fetch_and_replace()
        except Exception as e:
            logger.error(f"Unexpected error during initialization: {e}")
            outcome = FetchOutcome(error=map_http_error(None, str(e), self._masked_key, self._base_url),
                                   reachable=False)

        if outcome.ok:
            logger.info(f"API key validated, {outcome.loaded} keys loaded")
            self.result = InitializationResult(state=InitState.ONLINE_VALID)
        elif outcome.rejected:
            logger.error(f"Authentication failed: {outcome.error.code}")
            self.result = InitializationResult(state=AUTH_REJECTIONS[outcome.status], error=outcome.error)
        elif has_cached_data:
            logger.warning(f"Offline mode, using cache ({self._cache.size()} keys)")
            self.result = InitializationResult(state=InitState.OFFLINE_WITH_CACHE)
        else:
            error = ErrorInfo(
                code=ErrorCode.NETWORK_ERROR.value,
                message='Cannot connect to FetchYourKeys and no cache is available',
                suggestion='Check your internet connection and your FYK_SECRET_KEY',
                details={
                    'baseURL': self._base_url,
                    'cacheStatus': 'empty',
                    'apiKey': self._masked_key,
                    'cause': outcome.error.code,
                },
            )
            logger.error(error.message)
            state = InitState.OFFLINE_EMPTY if outcome.reachable else InitState.ERROR_NETWORK
            self.result = InitializationResult(state=state, error=error)
        return self.result

    async def fetch_and_replace(self, timeout: Optional[float] = None) -> FetchOutcome:
        """Fetch all key records and replace the cache contents in one commit.

        Updates is_online. Raises nothing for remote failures; they are
        reported in the returned FetchOutcome.
        """
        try:
            response = await asyncio.to_thread(self._keys_client.fetch_keys, timeout)
        except TransportError as e:
            self.is_online = False
            return FetchOutcome(error=map_http_error(None, e.message, self._masked_key, self._base_url),
                                reachable=False)

        if not response.ok:
            self.is_online = False
            error = map_http_error(response.status_code, None, self._masked_key, self._base_url)
            return FetchOutcome(status=response.status_code, error=error)

        records = response.records()
        if records is None:
            self.is_online = False
            logger.warning("No valid data received from the API")
            return FetchOutcome(status=response.status_code, error=ErrorInfo(
                code=ErrorCode.REFRESH_FAILED.value,
                message='Unexpected response from FetchYourKeys',
                suggestion='Check that the base URL points to the keys endpoint',
                details={'status': response.status_code, 'url': self._base_url},
            ))

        if not self._verify_ownership():
            self.is_online = False
            return FetchOutcome(status=response.status_code, error=ErrorInfo(
                code=ErrorCode.CACHE_INVALID.value,
                message='Cache is invalid for this API key',
                suggestion='Create the client without a shared cache from another API key',
                details={'apiKey': self._masked_key},
            ))

        loaded = self._cache.replace_all(records)
        self.is_online = True
        return FetchOutcome(loaded=loaded, status=response.status_code)

    async def probe(self, timeout: float) -> bool:
        """Check that the endpoint accepts the API key, without touching the cache.

        A failed probe clears is_online; only a reload sets it.
        """
        try:
            response = await asyncio.to_thread(self._keys_client.fetch_keys, timeout)
        except TransportError:
            self.is_online = False
            return False
        if not response.ok:
            self.is_online = False
        return response.ok
