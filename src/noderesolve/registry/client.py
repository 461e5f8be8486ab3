from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel, Field


class ResponseMetadata(BaseModel):
    """the caching headers of an index response."""
    expires: Optional[str] = None
    # one item per Cache-Control header line, in the order received
    cache_control: List[str] = Field(default_factory=list)


class RegistryResponse(BaseModel):
    url: str
    text: str
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class RegistryClient(ABC):
    @abstractmethod
    def fetch(self, url: str) -> RegistryResponse:
        """Fetch the raw version index at url."""
        pass

    def close(self):
        """Release any connections held by the client."""
        pass
