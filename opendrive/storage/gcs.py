import asyncio
from datetime import datetime
from typing import Optional

from google.api_core import exceptions as gcs_exceptions
from google.cloud import storage

from opendrive.core.exceptions import NotFoundError, StorageBackendError
from opendrive.schemas.file import StoredObject
from opendrive.storage.base import GCS, generate_storage_key
from opendrive.utils import get_logger

logger = get_logger(__name__)

# Uploads above this size switch to resumable, chunked transfers
RESUMABLE_THRESHOLD = 5 * 1024 * 1024
RESUMABLE_CHUNK_SIZE = 5 * 1024 * 1024  # multiple of 256 KiB


class GCSStorageProvider:
    """Google Cloud Storage backed by the google-cloud-storage SDK.

    Authenticates with a service account key file when one is configured,
    otherwise with application default credentials (including GKE workload
    identity). The client is built on first use.
    """

    provider_type = GCS

    def __init__(
        self,
        bucket: str = "opendrive",
        project_id: Optional[str] = None,
        keyfile: Optional[str] = None,
        storage_class: str = "STANDARD",
        client: Optional[storage.Client] = None,
    ):
        self.bucket_name = bucket
        self.project_id = project_id
        self.keyfile = keyfile
        self.storage_class = storage_class
        self._client = client
        self._bucket = None
        logger.info(
            f"GCS Storage Provider initialized - bucket: {bucket}, storage class: {storage_class}, "
            f"auth: {'service-account-key' if keyfile else 'ADC'}"
        )

    @property
    def bucket(self):
        if self._bucket is None:
            if self._client is None:
                if self.keyfile:
                    self._client = storage.Client.from_service_account_json(self.keyfile, project=self.project_id)
                else:
                    self._client = storage.Client(project=self.project_id)
            self._bucket = self._client.bucket(self.bucket_name)
        return self._bucket

    def generate_key(self, original_name: str, owner_id: str) -> str:
        return generate_storage_key(original_name, owner_id)

    def _save(self, key: str, original_name: str, data: bytes, mime_type: str, owner_id: str) -> int:
        blob = self.bucket.blob(key)
        blob.metadata = {
            "originalName": original_name,
            "userId": owner_id,
            "uploadedAt": datetime.utcnow().isoformat() + "Z",
        }
        blob.storage_class = self.storage_class
        if len(data) > RESUMABLE_THRESHOLD:
            blob.chunk_size = RESUMABLE_CHUNK_SIZE
        blob.upload_from_string(data, content_type=mime_type or "application/octet-stream")
        return len(data)

    async def upload(self, original_name: str, data: bytes, mime_type: str, owner_id: str) -> StoredObject:
        key = self.generate_key(original_name, owner_id)
        try:
            size = await asyncio.to_thread(self._save, key, original_name, data, mime_type, owner_id)
        except Exception as e:
            logger.error(f"GCS upload failed - bucket: {self.bucket_name}, key: {key}, error: {e}")
            raise StorageBackendError(f"GCS upload failed: {e}")

        logger.debug(f"File uploaded to GCS - bucket: {self.bucket_name}, key: {key}, size: {size}")
        return StoredObject(key=key, size=size)

    async def download(self, key: str) -> bytes:
        try:
            data = await asyncio.to_thread(lambda: self.bucket.blob(key).download_as_bytes())
        except gcs_exceptions.NotFound:
            raise NotFoundError(f"File not found in GCS: {key}")
        except Exception as e:
            logger.error(f"GCS download failed - bucket: {self.bucket_name}, key: {key}, error: {e}")
            raise StorageBackendError(f"GCS download failed: {e}")

        logger.debug(f"File downloaded from GCS - key: {key}, size: {len(data)}")
        return data

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(lambda: self.bucket.blob(key).delete())
        except gcs_exceptions.NotFound:
            logger.debug(f"GCS delete of missing key treated as success: {key}")
            return
        except Exception as e:
            logger.error(f"GCS delete failed - bucket: {self.bucket_name}, key: {key}, error: {e}")
            raise StorageBackendError(f"GCS delete failed: {e}")

        logger.debug(f"File deleted from GCS - key: {key}")

    async def exists(self, key: str) -> bool:
        try:
            return await asyncio.to_thread(lambda: self.bucket.blob(key).exists())
        except Exception as e:
            logger.error(f"Failed to check file existence in GCS for {key}: {e}")
            return False
