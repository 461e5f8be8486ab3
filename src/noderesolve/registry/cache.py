import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..domain.errors import ParseExpiryError, ReadCacheError, WriteCacheError
from ..domain.models import CacheRecord
from ..utils.hash import slot_key
from .expiry import format_http_date, parse_http_date

logger = logging.getLogger(__name__)

INDEX_FILE_NAME = "index.json"
EXPIRY_FILE_NAME = "index.json.expires"


class IndexCache:
    """
    a single cache slot holding a raw node index and its expiry marker.

    both files are replaced atomically, catalog first, so a reader can at
    worst pair an old catalog with a new expiry marker, never a partial file.
    """

    def __init__(self, cache_dir: Path, slot: Optional[str] = None):
        self.cache_dir = cache_dir
        self.slot_dir = cache_dir / slot if slot else cache_dir

    @classmethod
    def for_url(cls, cache_dir: Path, url: str) -> "IndexCache":
        """create the cache slot dedicated to the index at url."""
        return cls(cache_dir, slot_key(url))

    @property
    def index_file(self) -> Path:
        return self.slot_dir / INDEX_FILE_NAME

    @property
    def expiry_file(self) -> Path:
        return self.slot_dir / EXPIRY_FILE_NAME

    def read_if_valid(self, now: Optional[datetime] = None) -> Optional[CacheRecord]:
        """
        return the cached index if its expiry marker is still in the future.

        a missing or unparsable marker, an expired marker or a missing index
        file all count as a miss.

        raises:
            ReadCacheError: if a cache file exists but cannot be read
        """
        expiry_text = self._read_opt(self.expiry_file)
        if expiry_text is None:
            logger.debug(f"no index expiry marker at {self.expiry_file}")
            return None

        try:
            valid_until = parse_http_date(expiry_text)
        except ParseExpiryError as e:
            logger.debug(f"ignoring corrupt index expiry marker: {e}")
            return None

        if now is None:
            now = datetime.now(timezone.utc)
        if not now < valid_until:
            logger.debug(f"cached index expired at {format_http_date(valid_until)}")
            return None

        text = self._read_opt(self.index_file)
        if text is None:
            return None

        return CacheRecord(text=text, valid_until=valid_until)

    def write(self, text: str, valid_until: datetime) -> None:
        """
        persist a freshly fetched index and its expiry.

        raises:
            WriteCacheError: naming the file and the phase that failed
        """
        self._persist(self.index_file, text)
        self._persist(self.expiry_file, format_http_date(valid_until))

    def _read_opt(self, path: Path) -> Optional[str]:
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise ReadCacheError(path) from e

    def _persist(self, target: Path, content: str) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteCacheError(target.parent, "create_dir") from e

        # same directory as the target so the final rename stays on one filesystem
        try:
            tmp = tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                newline="",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            )
        except OSError as e:
            raise WriteCacheError(target.parent, "create_temp") from e

        tmp_path = Path(tmp.name)
        try:
            with tmp:
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise WriteCacheError(tmp_path, "write") from e

        try:
            os.replace(tmp_path, target)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise WriteCacheError(target, "persist") from e
