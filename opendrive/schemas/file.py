from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from beanie import PydanticObjectId
from opendrive.models.file import File

class FileCreate(BaseModel):
    """Schema for creating a new file (internal use with all fields)"""
    owner_id: str = Field(..., description="User who owns the file")
    folder_id: PydanticObjectId = Field(..., description="Containing folder")
    name: str = Field(..., description="Generated storage name")
    original_name: str = Field(..., description="User supplied file name")
    storage_key: str = Field(..., description="Locator inside the storage provider")
    storage_provider: str = Field(..., description="Provider tag: local, s3, gcs")
    mime_type: str = Field(..., description="File MIME type")
    size: int = Field(..., ge=0, description="File size (bytes)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "owner_id": "user_abc",
                "folder_id": "507f1f77bcf86cd799439011",
                "name": "f47ac10b58cc4372a5670e02b2c3d479-vacation.jpg",
                "original_name": "vacation.jpg",
                "storage_key": "user_abc/2026/01/11/f47ac10b-5886-41ca-8e3f-c8a4e5b9c7d2-vacation.jpg",
                "storage_provider": "local",
                "mime_type": "image/jpeg",
                "size": 1024000
            }
        }
    )

class FileUpdate(BaseModel):
    """Schema for updating an existing file"""
    original_name: Optional[str] = Field(None, min_length=1, max_length=255, description="User supplied file name")

class StoredObject(BaseModel):
    """Result of writing bytes to a storage provider"""
    key: str
    size: int = Field(..., ge=0, description="Bytes actually stored")

class DownloadedFile(BaseModel):
    """File bytes together with the metadata needed to serve them"""
    file_id: str
    file_name: str
    mime_type: str
    size: int
    content: bytes

class UploadFailure(BaseModel):
    file_name: str
    error: str

class BatchUploadResult(BaseModel):
    files: List[File] = Field(default_factory=list)
    errors: List[UploadFailure] = Field(default_factory=list)

    @property
    def success(self) -> int:
        return len(self.files)

    @property
    def failed(self) -> int:
        return len(self.errors)
