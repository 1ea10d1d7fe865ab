from .tree_service import TreeService
from .file_service import FileService
from .folder_service import FolderService
from .share_service import ShareService
from .public_service import PublicService, PUBLIC_NOT_FOUND
from .trash_service import TrashService
from .search_service import SearchService

__all__ = ["TreeService", "FileService", "FolderService", "ShareService", "PublicService", "PUBLIC_NOT_FOUND", "TrashService", "SearchService"]
