"""
FetchYourKeys client: lookups over the secure cache.

Every lookup awaits the initialization pass, checks that the cache belongs to
this client's API key and returns a result object instead of raising.

Usage:
    fyk = FetchYourKeys(api_key="fk_live_...")
    result = await fyk.get("openai")
    if result.success:
        print(result.data.value)

    token = await fyk.safe_get("github", fallback="")
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from .api_client import KeysClient, RemoteKeysClient
from .cache import MemoryCacheRegistry, SecureCache, create_cache, validate_credential
from .config import logging as log_config
from .config.settings import load_settings
from .crypto import derive_signature, mask_credential
from .exceptions import ErrorCode, FetchYourKeysError, map_http_error
from .initialization import InitializationController
from .models import (
    CacheStats, ErrorInfo, InitializationResult, InitState, Key, KeyResult,
    LogEntry, MultipleKeysResult, RefreshResult, ResultMeta,
)

logger = logging.getLogger(__name__)

AVAILABLE_KEYS_LIMIT = 10
CONNECTION_CHECK_TIMEOUT = 5.0


class FetchYourKeys:
    """Client for API keys stored on FetchYourKeys, with an encrypted offline cache."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 environment: Optional[str] = None, debug: Optional[bool] = None,
                 silent_mode: Optional[bool] = None, timeout: Optional[float] = None,
                 cache_dir: Optional[Path] = None, config_path: Optional[Path] = None,
                 cache: Optional[SecureCache] = None,
                 registry: Optional[MemoryCacheRegistry] = None,
                 keys_client: Optional[KeysClient] = None):
        """Validate the configuration, open the cache and start initialization.

        Args:
            api_key: FetchYourKeys API key (defaults to FYK_SECRET_KEY)
            base_url: Keys endpoint URL
            environment: 'dev' (disk cache) or 'prod' (memory cache)
            debug: Record debug logs and history
            silent_mode: Keep debug logs off the console
            timeout: Remote request timeout in seconds
            cache_dir: Base directory for the disk cache
            config_path: YAML settings file
            cache: Pre-built cache backend
            registry: Registry of shared memory caches
            keys_client: Client for the keys endpoint

        Raises:
            MissingCredentialError: If no API key is configured
            InvalidCredentialError: If the API key is malformed
        """
        self.settings = load_settings(
            config_path,
            api_key=api_key,
            base_url=base_url,
            environment=environment,
            debug=debug,
            silent_mode=silent_mode,
            timeout=timeout,
            cache_dir=cache_dir,
        )
        self.debug = self.settings.debug
        self.silent_mode = self.settings.silent_mode
        if self.debug:
            log_config.enable_debug(self.silent_mode)

        try:
            self._api_key = validate_credential(self.settings.api_key)
        except FetchYourKeysError as e:
            logger.error(f"Initialization error: {e.code}")
            raise

        self._masked_key = mask_credential(self._api_key)
        self.environment = self.settings.environment
        self.base_url = self.settings.base_url
        logger.debug(
            f"Initializing FetchYourKeys (environment={self.environment}, "
            f"apiKey={self._masked_key}, baseURL={self.base_url})"
        )

        self._cache = cache or create_cache(self._api_key, self.environment, registry, self.settings.cache_dir)
        self._cache_id = self._cache.get_cache_id()
        self._expected_signature = derive_signature(self._api_key, self._cache.salts)
        self._keys_client = keys_client or RemoteKeysClient(self.base_url, self._api_key, self.settings.timeout)
        self._rejection: Optional[ErrorInfo] = None
        self._recovered = False

        self._initializer = InitializationController(
            self._cache,
            self._keys_client,
            self._owns_cache,
            self._masked_key,
            self.base_url,
        )
        self._initializer.start()

    def __repr__(self) -> str:
        return f"FetchYourKeys(apiKey={self._masked_key!r}, environment={self.environment!r})"

    @property
    def is_online(self) -> bool:
        return self._initializer.is_online

    # Initialization

    async def ready(self) -> InitializationResult:
        """Wait for the initialization pass and return its settled result."""
        return await self._initializer.wait()

    def get_initialization_error(self) -> Optional[ErrorInfo]:
        return self._initializer.result.error

    def _owns_cache(self) -> bool:
        return self._cache.matches_signature(self._expected_signature)

    def _blocking_error(self, result: InitializationResult) -> Optional[ErrorInfo]:
        """Error that lookups must surface instead of cached data."""
        if self._rejection is not None:
            return self._rejection
        if result.error is None:
            return None
        if result.state.is_auth_error or not self._recovered:
            return result.error
        return None

    def _check_ownership(self) -> Optional[ErrorInfo]:
        """Clear a cache that belongs to another API key and report it."""
        if self._owns_cache():
            return None
        logger.warning(f"Cache {self._cache_id[:8]} does not belong to this API key, clearing it")
        self._cache.clear()
        return ErrorInfo(
            code=ErrorCode.CACHE_INVALID.value,
            message='Cache is invalid for this API key',
            suggestion='Reconnect to the internet and call refresh() to reload the cache',
            details={'apiKey': self._masked_key, 'cacheId': self._cache_id},
        )

    async def _lookup_error(self) -> Optional[ErrorInfo]:
        result = await self._initializer.wait()
        return self._blocking_error(result) or self._check_ownership()

    def _meta(self, cached: bool) -> ResultMeta:
        return ResultMeta(cached=cached, online=self.is_online)

    def _unexpected(self, e: Exception) -> ErrorInfo:
        if isinstance(e, FetchYourKeysError):
            return e.to_error_info()
        if isinstance(e, ValidationError):
            return ErrorInfo(
                code=ErrorCode.CACHE_ERROR.value,
                message='Cached key record is malformed',
                suggestion='Call refresh() to reload keys from FetchYourKeys',
                details={'errors': e.error_count()},
            )
        return map_http_error(None, str(e), self._masked_key, self.base_url)

    # Lookups

    async def get(self, label: str) -> KeyResult:
        """Get one key by label."""
        logger.debug(f'Looking up key "{label}"')
        try:
            error = await self._lookup_error()
            if error is not None:
                return KeyResult(success=False, error=error, metadata=self._meta(cached=False))

            record = self._cache.get(label)
            if record:
                logger.debug(f'Key found: "{label}"')
                return KeyResult(success=True, data=Key.sanitize(record), metadata=self._meta(cached=True))

            return KeyResult(
                success=False,
                error=ErrorInfo(
                    code=ErrorCode.KEY_NOT_FOUND.value,
                    message=f'Key "{label}" does not exist',
                    suggestion='Check the key name on your FetchYourKeys dashboard',
                    details={
                        'label': label,
                        'availableKeys': self._cache.keys()[:AVAILABLE_KEYS_LIMIT],
                    },
                ),
                metadata=self._meta(cached=False),
            )
        except Exception as e:
            logger.error(f'Failed to get key "{label}": {e}')
            return KeyResult(success=False, error=self._unexpected(e), metadata=self._meta(cached=False))

    async def safe_get(self, label: str, fallback: str = '') -> str:
        """Return the key's value, or fallback on any failure. Never raises."""
        try:
            result = await self.get(label)
        except Exception as e:
            logger.error(f'safe_get("{label}") failed: {e}')
            return fallback
        if result.success and result.data is not None and result.data.value:
            return result.data.value
        if result.error is not None:
            logger.debug(f"Using fallback for \"{label}\": {result.error.message}")
        return fallback

    get_with_fallback = safe_get

    async def get_multiple(self, labels: List[str]) -> MultipleKeysResult:
        """Get several keys; absent labels map to None."""
        logger.debug(f"Fetching {len(labels)} keys")
        try:
            error = await self._lookup_error()
            if error is not None:
                return MultipleKeysResult(success=False, error=error, metadata=self._meta(cached=False))

            results: Dict[str, Optional[Key]] = {}
            for label in labels:
                record = self._cache.get(label)
                results[label] = Key.sanitize(record) if record else None
            return MultipleKeysResult(success=True, data=results, metadata=self._meta(cached=True))
        except Exception as e:
            logger.error(f"Failed to get multiple keys: {e}")
            return MultipleKeysResult(success=False, error=self._unexpected(e), metadata=self._meta(cached=False))

    async def get_all(self) -> List[Key]:
        """All cached keys, or an empty list on any failure."""
        try:
            error = await self._lookup_error()
            if error is not None:
                logger.debug(f"get_all unavailable: {error.code}")
                return []
            keys = []
            for label in self._cache.keys():
                record = self._cache.get(label)
                if not record:
                    continue
                try:
                    keys.append(Key.sanitize(record))
                except ValidationError:
                    logger.warning(f'Skipping malformed cached key "{label}"')
            return keys
        except Exception as e:
            logger.error(f"Failed to get all keys: {e}")
            return []

    async def filter(self, predicate: Callable[[Key], bool]) -> List[Key]:
        return [key for key in await self.get_all() if predicate(key)]

    async def get_by_service(self, service: str) -> List[Key]:
        return await self.filter(lambda key: key.service == service)

    # Reload

    async def refresh(self) -> RefreshResult:
        """Reload all keys from the remote service.

        A failed refresh keeps serving the existing cache when there is one,
        but never after the API key itself was rejected.
        """
        logger.debug("Manual cache refresh")
        blocking = self._rejection or (
            self._initializer.result.error if self._initializer.result.state.is_auth_error else None
        )
        if blocking is not None:
            return RefreshResult(success=False, error=blocking, metadata=self._meta(cached=False))

        try:
            outcome = await self._initializer.fetch_and_replace()
        except Exception as e:
            logger.error(f"Refresh failed: {e}")
            return RefreshResult(success=False, error=self._unexpected(e), metadata=self._meta(cached=False))

        if outcome.ok:
            self._recovered = True
            logger.info(f"Cache refreshed ({outcome.loaded} keys)")
            return RefreshResult(success=True, data=True, metadata=ResultMeta(cached=False, online=True))

        if outcome.rejected:
            self._rejection = outcome.error
            logger.error(f"Refresh rejected: {outcome.error.code}")
            return RefreshResult(success=False, error=outcome.error, metadata=self._meta(cached=False))

        if outcome.error.code != ErrorCode.CACHE_INVALID.value and self._cache.size() > 0:
            logger.warning("Refresh failed, serving cached keys")
            return RefreshResult(
                success=False,
                error=ErrorInfo(
                    code=ErrorCode.REFRESH_FAILED.value,
                    message='Could not refresh, using cached keys',
                    suggestion='Offline mode active',
                    details={'cause': outcome.error.code},
                ),
                metadata=ResultMeta(cached=True, online=False),
            )

        return RefreshResult(success=False, error=outcome.error, metadata=self._meta(cached=False))

    async def check_connection(self) -> bool:
        """Probe the endpoint with the API key; a failure marks the client offline."""
        return await self._initializer.probe(CONNECTION_CHECK_TIMEOUT)

    # Diagnostics

    def get_stats(self) -> CacheStats:
        result = self._initializer.result
        common = dict(
            environment=self.environment,
            cache_type=self._cache.cache_type,
            cache_id=self._cache_id,
            api_key=self._masked_key,
            state=result.state,
            debug_enabled=self.debug,
            silent_mode=self.silent_mode,
        )

        error = self._blocking_error(result)
        if error is not None:
            return CacheStats(cached_keys=0, is_online=False, cache_valid=False,
                              status='initialization error', error=error, **common)

        cached_keys = self._cache.size()
        cache_valid = self._owns_cache()
        if not cache_valid:
            status = 'cache invalid'
        elif result.state is InitState.PENDING:
            status = 'initializing'
        elif self.is_online:
            status = 'online'
        elif cached_keys > 0:
            status = 'offline'
        else:
            status = 'offline (empty)'
        return CacheStats(cached_keys=cached_keys, is_online=self.is_online,
                          cache_valid=cache_valid, status=status, **common)

    def get_log_history(self) -> List[LogEntry]:
        if not self.debug:
            logger.warning("Log history unavailable, enable debug mode")
            return []
        return log_config.get_log_history()

    def clear_cache(self) -> None:
        logger.debug("Clearing cache")
        self._cache.clear()

    def set_debug(self, enabled: bool) -> None:
        self.debug = enabled
        if enabled:
            log_config.enable_debug(self.silent_mode)
        else:
            log_config.disable_debug()

    def set_silent_mode(self, silent: bool) -> None:
        self.silent_mode = silent
        log_config.set_silent_mode(silent)

    def close(self) -> None:
        """Clear the cache; the client should not be used afterwards."""
        self.clear_cache()
