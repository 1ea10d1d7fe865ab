import asyncio
import os
import tempfile
from pathlib import Path

from opendrive.core.exceptions import InvalidInputError, NotFoundError, StorageBackendError
from opendrive.schemas.file import StoredObject
from opendrive.storage.base import LOCAL, generate_storage_key
from opendrive.utils import get_logger

logger = get_logger(__name__)


class LocalStorageProvider:
    """Stores files on the local disk, for self-hosted deployments.

    Writes go to a temporary file in the target directory and are moved into
    place with os.replace, so readers never see a half-written object. A crash
    between the two steps can leave a stray `.tmp` file behind; that is a known
    limitation and is not cleaned up automatically.
    """

    provider_type = LOCAL

    def __init__(self, base_path: str = "./uploads"):
        self.base_path = Path(base_path).resolve()
        logger.info(f"Using local storage at {self.base_path}")

    def generate_key(self, original_name: str, owner_id: str) -> str:
        return generate_storage_key(original_name, owner_id)

    def _full_path(self, key: str) -> Path:
        full_path = (self.base_path / key).resolve()
        if not full_path.is_relative_to(self.base_path):
            raise InvalidInputError(f"Storage key escapes the storage root: {key}")
        return full_path

    def _write(self, full_path: Path, data: bytes) -> int:
        full_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=full_path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            os.replace(tmp_name, full_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return full_path.stat().st_size

    async def upload(self, original_name: str, data: bytes, mime_type: str, owner_id: str) -> StoredObject:
        key = self.generate_key(original_name, owner_id)
        full_path = self._full_path(key)
        try:
            size = await asyncio.to_thread(self._write, full_path, data)
        except OSError as e:
            logger.error(f"Local upload failed for {key}: {e}")
            raise StorageBackendError(f"Local upload failed: {e}")

        logger.debug(f"File stored in local storage - key: {key}, size: {size}")
        return StoredObject(key=key, size=size)

    async def download(self, key: str) -> bytes:
        full_path = self._full_path(key)
        try:
            data = await asyncio.to_thread(full_path.read_bytes)
        except FileNotFoundError:
            raise NotFoundError(f"File not found in local storage: {key}")
        except OSError as e:
            logger.error(f"Local download failed for {key}: {e}")
            raise StorageBackendError(f"Local download failed: {e}")

        logger.debug(f"File retrieved from local storage - key: {key}, size: {len(data)}")
        return data

    async def delete(self, key: str) -> None:
        full_path = self._full_path(key)
        try:
            await asyncio.to_thread(full_path.unlink)
        except FileNotFoundError:
            logger.debug(f"Local delete of missing key treated as success: {key}")
            return
        except OSError as e:
            logger.error(f"Local delete failed for {key}: {e}")
            raise StorageBackendError(f"Local delete failed: {e}")

        logger.debug(f"File deleted from local storage - key: {key}")

    async def exists(self, key: str) -> bool:
        try:
            full_path = self._full_path(key)
            return await asyncio.to_thread(full_path.is_file)
        except Exception as e:
            logger.error(f"Failed to check local file existence for {key}: {e}")
            return False
