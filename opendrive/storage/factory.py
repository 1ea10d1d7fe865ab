from typing import Dict, Optional

from opendrive.configs.settings import Settings, settings as default_settings
from opendrive.storage.base import GCS, LOCAL, S3, StorageProvider
from opendrive.utils import get_logger

logger = get_logger(__name__)

PROVIDER_ALIASES = {
    "local": LOCAL,
    "s3": S3,
    "minio": S3,
    "gcs": GCS,
    "google": GCS,
    "google-cloud": GCS,
}


def resolve_provider_type(provider: Optional[str]) -> str:
    """Map a configured selector to a provider tag; unknown values fall back to local."""
    tag = PROVIDER_ALIASES.get((provider or LOCAL).strip().lower())
    if tag is None:
        logger.warning(f"Unknown storage provider '{provider}', falling back to local storage")
        return LOCAL
    return tag


def create_storage_provider(provider: Optional[str] = None, config: Optional[Settings] = None) -> StorageProvider:
    """Construct one provider from configuration.

    Backend modules are imported here so that a deployment using local disk
    never loads the object store SDKs.
    """
    config = config or default_settings
    tag = resolve_provider_type(provider or config.STORAGE_PROVIDER)

    if tag == S3:
        from opendrive.storage.s3 import S3StorageProvider
        return S3StorageProvider(
            bucket=config.S3_BUCKET,
            endpoint=config.S3_HOST,
            access_key=config.S3_ACCESS_KEY,
            secret_key=config.S3_SECRET_KEY,
            region=config.S3_REGION,
            secure=config.S3_SSL,
        )

    if tag == GCS:
        from opendrive.storage.gcs import GCSStorageProvider
        return GCSStorageProvider(
            bucket=config.GCS_BUCKET,
            project_id=config.GCS_PROJECT_ID,
            keyfile=config.GCS_KEYFILE,
            storage_class=config.GCS_STORAGE_CLASS,
        )

    from opendrive.storage.local import LocalStorageProvider
    return LocalStorageProvider(base_path=config.STORAGE_PATH)


class StorageRegistry:
    """The process's default provider plus lazily built providers per tag.

    New uploads always go to the default provider. Reads and deletes look up
    the provider by the tag recorded on each file, so files written under a
    previously configured backend stay reachable after a switch.
    """

    def __init__(self, default: StorageProvider, config: Optional[Settings] = None):
        self.default = default
        self.config = config or default_settings
        self._providers: Dict[str, StorageProvider] = {default.provider_type: default}

    def register(self, provider: StorageProvider) -> None:
        self._providers[provider.provider_type] = provider

    def for_type(self, provider_type: Optional[str]) -> StorageProvider:
        tag = resolve_provider_type(provider_type)
        provider = self._providers.get(tag)
        if provider is None:
            provider = create_storage_provider(tag, self.config)
            self._providers[tag] = provider
        return provider


_storage_instance: Optional[StorageProvider] = None


def get_storage(config: Optional[Settings] = None) -> StorageProvider:
    """Get the configured storage provider instance (one per process)"""
    global _storage_instance
    if _storage_instance is None:
        _storage_instance = create_storage_provider(config=config)
    return _storage_instance


def reset_storage() -> None:
    """Drop the memoized provider; for test isolation only"""
    global _storage_instance
    _storage_instance = None
