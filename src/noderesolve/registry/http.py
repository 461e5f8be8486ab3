import logging
from typing import Optional

import httpx

from ..domain.errors import RegistryFetchError
from .client import RegistryClient, RegistryResponse, ResponseMetadata

logger = logging.getLogger(__name__)


class HttpRegistry(RegistryClient):
    """fetches a version index over http. no retries, no timeout."""

    def __init__(self, tool: str = "Node", client: Optional[httpx.Client] = None):
        self.tool = tool
        # a hung server blocks the caller; there is no cancellation here
        self.client = client or httpx.Client(timeout=None, follow_redirects=True)

    def fetch(self, url: str) -> RegistryResponse:
        logger.debug(f"fetching {self.tool} version index from {url}")
        try:
            response = self.client.get(url)
            response.raise_for_status()
            text = response.text
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # malformed urls surface as InvalidURL or ValueError before any request is sent
            raise RegistryFetchError(self.tool, url) from e

        metadata = ResponseMetadata(
            expires=response.headers.get("expires"),
            cache_control=response.headers.get_list("cache-control"),
        )
        return RegistryResponse(url=url, text=text, metadata=metadata)

    def close(self):
        self.client.close()
