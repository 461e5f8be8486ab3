import logging
from pathlib import Path
from typing import Optional

from ..domain.errors import ParseIndexError, ReadCacheError, WriteCacheError
from ..domain.models import NodeIndex, parse_index
from ..ui.progress import NullProgress, ProgressManager
from .cache import IndexCache
from .client import RegistryClient
from .expiry import compute_valid_until, format_http_date
from .http import HttpRegistry

logger = logging.getLogger(__name__)


class IndexProvider:
    """serves the node version index from the local cache, refetching when it goes stale."""

    def __init__(
        self,
        cache_dir: Path,
        registry: Optional[RegistryClient] = None,
        progress_manager: Optional[ProgressManager] = None,
    ):
        self.cache_dir = cache_dir
        self.registry = registry or HttpRegistry()
        self.progress_manager = progress_manager or NullProgress()

    def close(self):
        self.registry.close()

    def __enter__(self) -> "IndexProvider":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def cache_for(self, url: str) -> IndexCache:
        return IndexCache.for_url(self.cache_dir, url)

    def get_catalog(self, url: str) -> NodeIndex:
        """
        return the version index published at url.

        a fresh cached copy is used without touching the network. otherwise
        the index is fetched, parsed and written back to the cache; failing
        to write the cache does not fail the call.

        raises:
            RegistryFetchError: if the index could not be downloaded
            ParseIndexError: if the downloaded index is malformed
        """
        cache = self.cache_for(url)

        cached = self._read_cached(cache)
        if cached is not None:
            return cached

        with self.progress_manager.spinner(f"Fetching public registry: {url}"):
            response = self.registry.fetch(url)

        try:
            index = parse_index(response.text)
        except ValueError as e:
            raise ParseIndexError(url) from e

        valid_until = compute_valid_until(response.metadata)
        try:
            cache.write(response.text, valid_until)
            logger.debug(f"cached index from {url} until {format_http_date(valid_until)}")
        except WriteCacheError as e:
            logger.warning(f"{e}; continuing without cache")

        return index

    def _read_cached(self, cache: IndexCache) -> Optional[NodeIndex]:
        try:
            record = cache.read_if_valid()
        except ReadCacheError as e:
            logger.warning(f"{e}; fetching a fresh index")
            return None

        if record is None:
            return None

        try:
            index = parse_index(record.text)
        except ValueError:
            logger.warning(f"cached index at {cache.index_file} is corrupt; fetching a fresh index")
            return None

        logger.debug(f"using cached index from {cache.index_file}")
        return index
