"""Storage provider capability set and the shared key scheme.

Callers depend only on :class:`StorageProvider`; the Local, S3-compatible and
GCS implementations satisfy it independently. Every backend-specific error is
normalized to :class:`NotFoundError` or :class:`StorageBackendError` before it
leaves a provider.
"""

import os
import uuid
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from opendrive.schemas.file import StoredObject
from opendrive.utils.base import sanitize_base_name

LOCAL = "local"
S3 = "s3"
GCS = "gcs"


@runtime_checkable
class StorageProvider(Protocol):
    provider_type: str

    def generate_key(self, original_name: str, owner_id: str) -> str:
        ...

    async def upload(self, original_name: str, data: bytes, mime_type: str, owner_id: str) -> StoredObject:
        ...

    async def download(self, key: str) -> bytes:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def exists(self, key: str) -> bool:
        ...


def generate_storage_key(original_name: str, owner_id: str, now: Optional[datetime] = None) -> str:
    """Build `{owner_id}/{YYYY}/{MM}/{DD}/{uuid}-{safe_base}{ext}`.

    The uuid makes keys collision resistant; the sanitized base name keeps
    them filesystem and URL safe on every backend.
    """
    now = now or datetime.utcnow()
    base, ext = os.path.splitext(os.path.basename(original_name or ""))
    safe_base = sanitize_base_name(base)
    safe_ext = "." + sanitize_base_name(ext[1:]) if ext else ""
    return f"{owner_id}/{now:%Y}/{now:%m}/{now:%d}/{uuid.uuid4()}-{safe_base}{safe_ext}"
