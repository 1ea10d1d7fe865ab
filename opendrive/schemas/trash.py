from typing import List
from pydantic import BaseModel, Field

from opendrive.models.file import File
from opendrive.models.folder import Folder

class TrashListing(BaseModel):
    folders: List[Folder] = Field(default_factory=list)
    files: List[File] = Field(default_factory=list)

class CascadeResult(BaseModel):
    """Counts of entities touched by a cascade operation"""
    folders: int = 0
    files: int = 0
    storage_failures: int = 0

class SearchResults(BaseModel):
    folders: List[Folder] = Field(default_factory=list)
    files: List[File] = Field(default_factory=list)

