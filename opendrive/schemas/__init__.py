from opendrive.schemas.folder import FolderCreate, FolderUpdate, FolderDetail, BreadcrumbItem
from opendrive.schemas.file import (
    FileCreate, FileUpdate, StoredObject, DownloadedFile, UploadFailure, BatchUploadResult
)
from opendrive.schemas.share import EntityKind, ShareLink, SharedResource, PublicFolderView
from opendrive.schemas.trash import TrashListing, CascadeResult, SearchResults

__all__ = [
    "FolderCreate",
    "FolderUpdate",
    "FolderDetail",
    "BreadcrumbItem",
    "FileCreate",
    "FileUpdate",
    "StoredObject",
    "DownloadedFile",
    "UploadFailure",
    "BatchUploadResult",
    "EntityKind",
    "ShareLink",
    "SharedResource",
    "PublicFolderView",
    "TrashListing",
    "CascadeResult",
    "SearchResults",
]
