"""node version resolution against the public version index."""
from .resolver import NodeResolver, resolve

__all__ = [
    "NodeResolver",
    "resolve",
]
