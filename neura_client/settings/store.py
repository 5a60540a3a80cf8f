"""
Settings Store
Cached account settings; answers "is Xero connected?" for the generation gate.
"""

import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError

from neura_client.config import settings as app_settings
from neura_client.core.cache import CacheStore
from neura_client.core.errors import ErrorCode, NeuraApiError, sanitize_error_message
from neura_client.core.http import ApiClient
from neura_client.settings.schemas import SettingsData

logger = logging.getLogger(__name__)


class SettingsStore:
    """
    Account settings with a 5 minute cache.

    Settings are not critical for the insight views, so fetch failures are
    recorded and swallowed. Until a fetch succeeds again the connection
    state reads as "not connected", even if an older value is cached.
    """

    SETTINGS_PATH = "/settings/"

    def __init__(
        self,
        api: ApiClient,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.error: Optional[str] = None
        self._cache: CacheStore[SettingsData] = CacheStore(
            name="settings",
            fetcher=self._fetch,
            ttl_seconds=ttl_seconds if ttl_seconds is not None else app_settings.settings_cache_ttl_seconds,
            clock=clock,
        )

    async def _fetch(self) -> SettingsData:
        data = await self.api.get(self.SETTINGS_PATH)
        return SettingsData.model_validate(data)

    @property
    def settings(self) -> Optional[SettingsData]:
        return self._cache.peek()

    @property
    def is_loading(self) -> bool:
        return self._cache.is_loading

    @property
    def last_fetched(self) -> Optional[float]:
        return self._cache.fetched_at

    async def fetch_settings(self) -> Optional[SettingsData]:
        """
        Return settings, fetching only when the cache is stale.

        Returns:
            Settings, or the last known value (possibly None) on failure
        """
        try:
            data = await self._cache.get()
        except (NeuraApiError, ValidationError) as e:
            self.error = sanitize_error_message(e, ErrorCode.SETTINGS_LOAD_FAILED, log_details=False)
            logger.warning("Settings fetch failed, treating Xero as not connected: %s", e)
            return self._cache.peek()

        self.error = None
        return data

    def is_xero_connected(self) -> bool:
        """False when settings are unknown or the last fetch failed."""
        if self.error is not None:
            return False
        current = self._cache.peek()
        if current is None:
            return False
        return current.xero_integration.is_connected

    def update_settings(self, data: SettingsData) -> None:
        """Store settings confirmed by another call (e.g. after reconnecting)."""
        self._cache.update(data)
        self.error = None

    def clear_settings(self) -> None:
        self._cache.invalidate()
        self.error = None
