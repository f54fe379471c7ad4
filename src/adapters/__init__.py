"""
Adapters package
----------------

Abstractions for I/O and run metadata so that preparation, modeling and
reporting code never touches the filesystem or the run registry directly.
"""

from .storage import (  # noqa: F401
    LocalStorageAdapter,
    StorageAdapter,
)
from .metadata import (  # noqa: F401
    LocalMetadataAdapter,
    MetadataAdapter,
)

__all__ = [
    "StorageAdapter",
    "LocalStorageAdapter",
    "MetadataAdapter",
    "LocalMetadataAdapter",
]
