from opendrive.storage.base import StorageProvider, generate_storage_key, LOCAL, S3, GCS
from opendrive.storage.factory import (
    StorageRegistry, create_storage_provider, get_storage, reset_storage, resolve_provider_type
)

__all__ = [
    "StorageProvider",
    "generate_storage_key",
    "LOCAL",
    "S3",
    "GCS",
    "StorageRegistry",
    "create_storage_provider",
    "get_storage",
    "reset_storage",
    "resolve_provider_type",
]
