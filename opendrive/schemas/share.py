from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from opendrive.models.file import File
from opendrive.models.folder import Folder

from opendrive.schemas.folder import BreadcrumbItem

class EntityKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"

class ShareLink(BaseModel):
    kind: EntityKind
    entity_id: str
    share_id: str

    @property
    def share_url(self) -> str:
        return f"/public/{self.share_id}"

class SharedResource(BaseModel):
    """What a public share token resolves to"""
    kind: EntityKind
    folder: Optional[Folder] = None
    file: Optional[File] = None

    @property
    def entity(self):
        return self.folder if self.kind == EntityKind.FOLDER else self.file

class PublicFolderView(BaseModel):
    """Read-only listing of one folder inside a shared subtree"""
    root: Folder
    folder: Folder
    subfolders: List[Folder] = Field(default_factory=list)
    files: List[File] = Field(default_factory=list)
    breadcrumb: List[BreadcrumbItem] = Field(default_factory=list)

