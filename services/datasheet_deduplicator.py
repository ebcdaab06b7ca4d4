"""
Datasheet deduplication keyed on source URL.

A datasheet URL is downloaded at most once: later rows (and later
imports) reuse the asset registered for the same exact URL.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional
import structlog

from exceptions import StorageError
from services.asset_fetcher import AssetFetcher
from services.storage_service import StorageService

logger = structlog.get_logger(__name__)


class DatasheetDeduplicator:
    """
    Resolve a datasheet URL to an asset ID, fetching only on a miss.

    Lookup and fetch for one URL run under a per-URL lock, so rows
    processed concurrently never download the same URL twice. A URL's
    lock only exists while some thread is resolving that URL.
    """

    def __init__(self, storage: StorageService, fetcher: AssetFetcher):
        self.storage = storage
        self.fetcher = fetcher
        # url -> [lock, number of threads holding or waiting for it]
        self._locks: dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _url_lock(self, url: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.setdefault(url, [threading.Lock(), 0])
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[url]

    def resolve(self, url: str, owner_record_id: Optional[str] = None) -> Optional[str]:
        """
        Return the asset ID for a datasheet URL.

        Args:
            url: Datasheet URL, matched exactly (no normalization)
            owner_record_id: Record to own the asset if it gets fetched now

        Returns:
            Existing or newly fetched asset ID, or None if the fetch failed
        """
        with self._url_lock(url):
            try:
                asset_id = self.storage.lookup_asset_by_source_url(url)
            except StorageError as e:
                logger.error("datasheet_lookup_failed", url=url, error=e.message)
                return None

            if asset_id:
                logger.info("datasheet_reused", url=url, asset_id=asset_id)
                return asset_id

            return self.fetcher.fetch_generic(url, owner_record_id=owner_record_id)
