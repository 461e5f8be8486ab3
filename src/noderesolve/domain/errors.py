from pathlib import Path


class NodeResolveError(Exception):
    """base class for exceptions in noderesolve."""
    pass


class RegistryFetchError(NodeResolveError):
    """raised when the remote index could not be fetched."""
    def __init__(self, tool: str, url: str):
        self.tool = tool
        self.url = url
        super().__init__(f"Could not download {tool} version registry from {url}")


class ParseIndexError(NodeResolveError):
    """raised when a fetched index body is not a valid version index."""
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Could not parse Node version index from {url}")


class ParseExpiryError(NodeResolveError):
    """raised when an expiry marker is not a valid HTTP date."""
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Could not parse index expiry date: {value!r}")


class ReadCacheError(NodeResolveError):
    """raised when a cache file exists but cannot be read."""
    def __init__(self, file: Path):
        self.file = file
        super().__init__(f"Could not read Node index cache file: {file}")


class WriteCacheError(NodeResolveError):
    """raised when a cache artifact cannot be persisted.

    phase is one of 'create_dir', 'create_temp', 'write' or 'persist'.
    """
    def __init__(self, file: Path, phase: str):
        self.file = file
        self.phase = phase
        super().__init__(f"Could not write Node index cache file {file} ({phase})")


class VersionNotFoundError(NodeResolveError):
    """raised when no catalog entry satisfies the requested specifier."""
    def __init__(self, matching: str):
        self.matching = matching
        super().__init__(f"Could not find Node version matching '{matching}' in the version registry")


class InvalidVersionSpecError(NodeResolveError):
    """raised when a specifier string is neither a keyword, version nor range."""
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid Node version specifier: {text!r}")
