from typing import Optional

from opendrive.crud.file import FileCRUD, file_crud as default_file_crud
from opendrive.crud.folder import FolderCRUD, folder_crud as default_folder_crud
from opendrive.schemas import CascadeResult, TrashListing
from opendrive.services.file_service import FileService
from opendrive.services.folder_service import FolderService
from opendrive.utils import get_logger

logger = get_logger(__name__)


class TrashService:
    """Trash listing and emptying for one user"""

    def __init__(
        self,
        folder_service: FolderService,
        file_service: FileService,
        folder_crud: Optional[FolderCRUD] = None,
        file_crud: Optional[FileCRUD] = None,
    ):
        self.folder_service = folder_service
        self.file_service = file_service
        self.folder_crud = folder_crud or default_folder_crud
        self.file_crud = file_crud or default_file_crud

    async def list_trash(self, user_id: str) -> TrashListing:
        folders = await self.folder_crud.get_trashed(user_id)
        files = await self.file_crud.get_trashed(user_id)
        return TrashListing(folders=folders, files=files)

    async def empty_trash(self, user_id: str) -> CascadeResult:
        """Permanently delete everything in the user's trash"""
        result = CascadeResult()

        for folder in await self.folder_crud.get_trashed(user_id):
            # An earlier cascade in this loop may already have purged it
            current = await self.folder_crud.get_by_id(folder.id)
            if current is None or current.deleted_at is None:
                continue
            purged = await self.folder_service.permanently_delete_folder(user_id, str(folder.id))
            result.folders += purged.folders
            result.files += purged.files
            result.storage_failures += purged.storage_failures

        for file in await self.file_crud.get_trashed(user_id):
            released = await self.file_service.permanently_delete_file(user_id, str(file.id))
            result.files += 1
            if not released:
                result.storage_failures += 1

        logger.info(
            f"Trash emptied for {user_id}: {result.folders} folders, {result.files} files, "
            f"{result.storage_failures} storage failures"
        )
        return result
