from typing import Annotated
import pymongo
from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field
from opendrive.models.time_mixin import TimeMixin
from opendrive.models.soft_delete_mixin import SoftDeleteMixin
from opendrive.models.share_mixin import ShareMixin


class File(Document, TimeMixin, SoftDeleteMixin, ShareMixin):
    """File metadata in MongoDB; bytes live in the storage provider"""

    owner_id: Annotated[str, Indexed(str)] = Field(..., description="User who owns the file")
    folder_id: PydanticObjectId = Field(..., description="Containing folder")
    name: Annotated[str, Indexed(str)] = Field(..., description="Generated storage name")
    original_name: Annotated[str, Indexed(str)] = Field(..., description="User supplied file name")
    storage_key: Annotated[str, Indexed(str)] = Field(..., description="Locator inside the storage provider")
    storage_provider: str = Field(default="local", description="Provider tag holding the bytes: local, s3, gcs")
    mime_type: str = Field(default="application/octet-stream", description="File MIME type")
    size: int = Field(default=0, ge=0, description="File size (bytes)")

    class Settings:
        name = "files"
        indexes = [
            [("owner_id", pymongo.ASCENDING), ("deleted_at", pymongo.ASCENDING)],
            "folder_id",
            "share_id",
        ]
