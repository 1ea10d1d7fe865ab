from pydantic import BaseModel, Field
from typing import List, Optional
from beanie import PydanticObjectId
from opendrive.models.folder import Folder
from opendrive.models.file import File


class FolderCreate(BaseModel):
    """Internal schema for creating folder with all required fields"""
    owner_id: str
    name: str
    parent_id: Optional[PydanticObjectId] = None
    path: str = "/"

class FolderUpdate(BaseModel):
    """Schema for updating folder"""
    name: Optional[str] = None
    parent_id: Optional[PydanticObjectId] = None
    path: Optional[str] = None

class BreadcrumbItem(BaseModel):
    id: str
    name: str

class FolderDetail(BaseModel):
    """Folder with its direct children and ancestor chain"""
    folder: Folder
    subfolders: List[Folder] = Field(default_factory=list)
    files: List[File] = Field(default_factory=list)
    breadcrumb: List[BreadcrumbItem] = Field(default_factory=list)

