import logging
from pathlib import Path
from typing import Callable, Optional, Union

from semantic_version import Version

from ..config import CACHE_DIR, DEFAULT_INDEX_BASE, get_index_base, index_url
from ..domain.errors import VersionNotFoundError
from ..domain.models import NodeEntry, SpecKind, VersionSpec
from ..registry.index import IndexProvider
from ..ui.progress import ProgressManager

logger = logging.getLogger(__name__)


class NodeResolver:
    """
    picks a concrete node version for a specifier.

    the index is trusted to list versions newest first: the first entry that
    matches is taken as the best one and nothing is re-sorted.
    """

    def __init__(self, provider: IndexProvider, index_base: str = DEFAULT_INDEX_BASE):
        self.provider = provider
        self.index_base = index_base

    def resolve(self, spec: VersionSpec, base_url: Optional[str] = None) -> Version:
        """
        resolve spec against the index at base_url (or the configured server).

        raises:
            VersionNotFoundError: if no entry in the index matches
        """
        if spec.kind == SpecKind.EXACT:
            return spec.version

        url = index_url(base_url or self.index_base)

        if spec.kind == SpecKind.LATEST:
            predicate = lambda entry: True
        elif spec.kind == SpecKind.LTS:
            predicate = lambda entry: entry.lts
        else:
            requirement = spec.requirement
            predicate = lambda entry: requirement.match(entry.version)

        version = self.match(url, predicate)
        if version is None:
            raise VersionNotFoundError(str(spec))

        logger.debug(f"found node version {version} matching '{spec}' from {url}")
        return version

    def match(self, url: str, predicate: Callable[[NodeEntry], bool]) -> Optional[Version]:
        """return the version of the first index entry satisfying predicate."""
        index = self.provider.get_catalog(url)
        entry = next((e for e in index.entries if predicate(e)), None)
        return entry.version if entry is not None else None


def resolve(
    specifier: Union[str, VersionSpec],
    url: Optional[str] = None,
    cache_dir: Path = CACHE_DIR,
    progress_manager: Optional[ProgressManager] = None,
) -> Version:
    """
    resolve a specifier using the configured distribution server and cache.

    args:
        specifier: a VersionSpec, or text such as 'latest', 'lts', '^20' or '18.17.1'
        url: optional distribution server base url overriding the configuration
        cache_dir: directory holding the cached indexes
        progress_manager: optional progress manager bracketing network fetches
    """
    if isinstance(specifier, str):
        specifier = VersionSpec.parse(specifier)

    with IndexProvider(cache_dir, progress_manager=progress_manager) as provider:
        resolver = NodeResolver(provider, get_index_base())
        return resolver.resolve(specifier, url)
