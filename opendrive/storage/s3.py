import asyncio
from io import BytesIO
from typing import Optional

from minio import Minio
from minio.error import S3Error

from opendrive.core.exceptions import NotFoundError, StorageBackendError
from opendrive.schemas.file import StoredObject
from opendrive.storage.base import S3, generate_storage_key
from opendrive.utils import get_logger

logger = get_logger(__name__)

NOT_FOUND_CODES = {"NoSuchKey", "NoSuchObject", "NotFound", "ResourceNotFound"}


def _is_not_found(error: Exception) -> bool:
    return isinstance(error, S3Error) and error.code in NOT_FOUND_CODES


class S3StorageProvider:
    """S3-compatible object storage: AWS S3, MinIO, Backblaze B2, DigitalOcean Spaces.

    Uploads are single PUTs, so an object is either fully written or absent.
    """

    provider_type = S3

    def __init__(
        self,
        bucket: str = "drive",
        endpoint: str = "s3.amazonaws.com",
        access_key: str = "",
        secret_key: str = "",
        region: Optional[str] = "us-east-1",
        secure: bool = True,
        client: Optional[Minio] = None,
    ):
        self.bucket = bucket
        self.client = client or Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._bucket_ready = False
        logger.info(f"Using S3-compatible storage - endpoint: {endpoint}, bucket: {bucket}")

    def generate_key(self, original_name: str, owner_id: str) -> str:
        return generate_storage_key(original_name, owner_id)

    def _ensure_bucket(self) -> None:
        """Create bucket if it doesn't exist"""
        if self._bucket_ready:
            return
        if not self.client.bucket_exists(bucket_name=self.bucket):
            self.client.make_bucket(bucket_name=self.bucket)
            logger.info(f"Created bucket {self.bucket}")
        self._bucket_ready = True

    def _put(self, key: str, data: bytes, mime_type: str) -> int:
        self._ensure_bucket()
        self.client.put_object(
            bucket_name=self.bucket,
            object_name=key,
            data=BytesIO(data),
            length=len(data),
            content_type=mime_type or "application/octet-stream",
        )
        return len(data)

    def _get(self, key: str) -> bytes:
        response = self.client.get_object(bucket_name=self.bucket, object_name=key)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    async def upload(self, original_name: str, data: bytes, mime_type: str, owner_id: str) -> StoredObject:
        key = self.generate_key(original_name, owner_id)
        try:
            size = await asyncio.to_thread(self._put, key, data, mime_type)
        except Exception as e:
            logger.error(f"S3 upload failed - bucket: {self.bucket}, key: {key}, error: {e}")
            raise StorageBackendError(f"S3 upload failed: {e}")

        logger.debug(f"File stored in S3-compatible storage - bucket: {self.bucket}, key: {key}, size: {size}")
        return StoredObject(key=key, size=size)

    async def download(self, key: str) -> bytes:
        try:
            data = await asyncio.to_thread(self._get, key)
        except Exception as e:
            if _is_not_found(e):
                raise NotFoundError(f"File not found in S3: {key}")
            logger.error(f"S3 download failed - bucket: {self.bucket}, key: {key}, error: {e}")
            raise StorageBackendError(f"S3 download failed: {e}")

        logger.debug(f"File retrieved from S3-compatible storage - key: {key}, size: {len(data)}")
        return data

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.client.remove_object, bucket_name=self.bucket, object_name=key)
        except Exception as e:
            if _is_not_found(e):
                logger.debug(f"S3 delete of missing key treated as success: {key}")
                return
            logger.error(f"S3 delete failed - bucket: {self.bucket}, key: {key}, error: {e}")
            raise StorageBackendError(f"S3 delete failed: {e}")

        logger.debug(f"File deleted from S3-compatible storage - key: {key}")

    async def exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(self.client.stat_object, bucket_name=self.bucket, object_name=key)
            return True
        except Exception as e:
            if not _is_not_found(e):
                logger.error(f"Failed to check S3 object existence for {key}: {e}")
            return False
