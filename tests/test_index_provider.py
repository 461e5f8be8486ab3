"""test suite for the cached index provider."""
import pytest
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from noderesolve.domain.errors import (
    ParseIndexError,
    ReadCacheError,
    RegistryFetchError,
    WriteCacheError,
)
from noderesolve.registry.cache import IndexCache
from noderesolve.registry.client import RegistryClient, RegistryResponse, ResponseMetadata
from noderesolve.registry.expiry import parse_http_date
from noderesolve.registry.index import IndexProvider

URL = "https://nodejs.org/dist/index.json"


class MockRegistryClient(RegistryClient):
    """mock registry client counting fetches."""

    def __init__(self, text: str, cache_control=None, expires=None):
        self.text = text
        self.metadata = ResponseMetadata(cache_control=cache_control or [], expires=expires)
        self.calls = []

    def fetch(self, url: str) -> RegistryResponse:
        self.calls.append(url)
        return RegistryResponse(url=url, text=self.text, metadata=self.metadata)


class TestIndexProvider:
    @pytest.fixture
    def registry(self, sample_index_text):
        return MockRegistryClient(sample_index_text, cache_control=["max-age=3600"])

    @pytest.fixture
    def provider(self, tmp_path, registry):
        return IndexProvider(tmp_path, registry=registry)

    def test_miss_fetches_once_and_caches(self, provider, registry, tmp_path):
        fetched_at = datetime.now(timezone.utc).replace(microsecond=0)

        index = provider.get_catalog(URL)

        assert registry.calls == [URL]
        assert [str(e.version) for e in index.entries] == ["21.1.0", "20.9.0", "18.18.2"]

        slot = IndexCache.for_url(tmp_path, URL)
        assert slot.index_file.read_text() == registry.text
        assert parse_http_date(slot.expiry_file.read_text()) > fetched_at

    def test_hit_does_not_fetch(self, tmp_path, sample_index_text):
        slot = IndexCache.for_url(tmp_path, URL)
        slot.write(sample_index_text, datetime.now(timezone.utc) + timedelta(hours=1))
        registry = MagicMock(spec=RegistryClient)

        index = IndexProvider(tmp_path, registry=registry).get_catalog(URL)

        registry.fetch.assert_not_called()
        assert len(index.entries) == 3

    def test_repeated_calls_are_identical(self, provider, registry):
        first = provider.get_catalog(URL)
        second = provider.get_catalog(URL)

        assert registry.calls == [URL]
        assert first == second
        assert first is not second

    def test_expired_cache_refetches(self, tmp_path, registry):
        slot = IndexCache.for_url(tmp_path, URL)
        slot.write("[]", datetime.now(timezone.utc) - timedelta(seconds=1))

        index = IndexProvider(tmp_path, registry=registry).get_catalog(URL)

        assert registry.calls == [URL]
        assert len(index.entries) == 3
        assert slot.read_if_valid().text == registry.text

    def test_corrupt_expiry_marker_refetches(self, provider, registry, tmp_path):
        provider.get_catalog(URL)
        slot = IndexCache.for_url(tmp_path, URL)
        slot.expiry_file.write_text("Tue, 32 Foo")

        provider.get_catalog(URL)

        assert registry.calls == [URL, URL]

    def test_corrupt_cached_index_refetches(self, tmp_path, registry):
        slot = IndexCache.for_url(tmp_path, URL)
        slot.write('[{"version": "v20.9', datetime.now(timezone.utc) + timedelta(hours=1))

        index = IndexProvider(tmp_path, registry=registry).get_catalog(URL)

        assert registry.calls == [URL]
        assert len(index.entries) == 3

    def test_unreadable_cache_refetches(self, provider, registry):
        with patch.object(IndexCache, "read_if_valid", side_effect=ReadCacheError(Path("index.json"))):
            index = provider.get_catalog(URL)

        assert registry.calls == [URL]
        assert len(index.entries) == 3

    def test_cache_write_failure_is_not_fatal(self, provider, registry):
        error = WriteCacheError(Path("index.json"), "persist")
        with patch.object(IndexCache, "write", side_effect=error):
            index = provider.get_catalog(URL)

        assert len(index.entries) == 3

    def test_fetch_error_propagates(self, tmp_path):
        registry = MagicMock(spec=RegistryClient)
        registry.fetch.side_effect = RegistryFetchError("Node", URL)

        with pytest.raises(RegistryFetchError):
            IndexProvider(tmp_path, registry=registry).get_catalog(URL)

    def test_unparsable_fetch_is_fatal(self, tmp_path):
        registry = MockRegistryClient("<html>maintenance</html>")

        with pytest.raises(ParseIndexError) as exc_info:
            IndexProvider(tmp_path, registry=registry).get_catalog(URL)

        assert exc_info.value.url == URL
        # nothing is cached for a body that did not parse
        assert IndexCache.for_url(tmp_path, URL).read_if_valid() is None

    def test_expires_header_is_persisted(self, tmp_path, sample_index_text):
        registry = MockRegistryClient(
            sample_index_text,
            cache_control=["max-age=60"],
            expires="Wed, 02 Jan 2030 03:04:05 GMT",
        )

        IndexProvider(tmp_path, registry=registry).get_catalog(URL)

        slot = IndexCache.for_url(tmp_path, URL)
        assert slot.expiry_file.read_text() == "Wed, 02 Jan 2030 03:04:05 GMT"

    @pytest.mark.parametrize("cache_control", ["max-age=999999999999", "max-age=²"])
    def test_unusual_max_age_still_caches(self, tmp_path, sample_index_text, cache_control):
        registry = MockRegistryClient(sample_index_text, cache_control=[cache_control])

        index = IndexProvider(tmp_path, registry=registry).get_catalog(URL)

        assert len(index.entries) == 3
        slot = IndexCache.for_url(tmp_path, URL)
        assert slot.read_if_valid() is not None

    def test_close_closes_registry(self, tmp_path):
        registry = MagicMock(spec=RegistryClient)

        with IndexProvider(tmp_path, registry=registry) as provider:
            assert isinstance(provider, IndexProvider)
            registry.close.assert_not_called()

        registry.close.assert_called_once()

    def test_distinct_urls_use_distinct_slots(self, provider, registry):
        mirror = "https://mirror.example.com/node/index.json"
        provider.get_catalog(URL)
        provider.get_catalog(mirror)
        provider.get_catalog(URL)
        provider.get_catalog(mirror)

        assert registry.calls == [URL, mirror]

    def test_fetch_is_bracketed_by_spinner(self, tmp_path, registry):
        progress_manager = MagicMock()

        IndexProvider(tmp_path, registry=registry, progress_manager=progress_manager).get_catalog(URL)

        progress_manager.spinner.assert_called_once_with(f"Fetching public registry: {URL}")
        progress_manager.spinner.return_value.__enter__.assert_called_once()
        progress_manager.spinner.return_value.__exit__.assert_called_once()

    def test_cache_hit_shows_no_spinner(self, provider, tmp_path, registry):
        provider.get_catalog(URL)
        progress_manager = MagicMock()

        IndexProvider(tmp_path, registry=registry, progress_manager=progress_manager).get_catalog(URL)

        progress_manager.spinner.assert_not_called()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
