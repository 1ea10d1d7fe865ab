import uuid
from datetime import datetime
from typing import List, Optional

from opendrive.core.events import EventBus, event_bus as default_event_bus
from opendrive.core.exceptions import InvalidInputError, NotFoundError
from opendrive.crud.file import FileCRUD, file_crud as default_file_crud
from opendrive.crud.folder import FolderCRUD, folder_crud as default_folder_crud
from opendrive.models.folder import Folder
from opendrive.schemas import CascadeResult, FolderCreate, FolderDetail
from opendrive.services.access import clean_name, get_owned
from opendrive.services.file_service import FileService
from opendrive.services.tree_service import TreeService
from opendrive.utils import get_logger

logger = get_logger(__name__)


def child_path(parent: Optional[Folder]) -> str:
    """Display path for a folder created under parent"""
    if parent is None:
        return "/"
    return f"{parent.path or '/'}{parent.name}/"


class FolderService:
    """Folder tree operations: create, read, rename, move and the trash cascades.

    Cascades walk the subtree into a flat id list and apply one batched write
    per collection. MongoDB only guarantees atomicity per document, so a crash
    part way through can leave a subtree partially marked. Every cascade is
    safe to call again on the same root and finishes the job.
    """

    def __init__(
        self,
        file_service: FileService,
        crud: Optional[FolderCRUD] = None,
        file_crud: Optional[FileCRUD] = None,
        tree: Optional[TreeService] = None,
        events: Optional[EventBus] = None,
    ):
        self.file_service = file_service
        self.crud = crud or default_folder_crud
        self.file_crud = file_crud or default_file_crud
        self.tree = tree or TreeService(self.crud, self.file_crud)
        self.events = events or default_event_bus

    async def get_folder(self, user_id: str, folder_id: str, include_deleted: bool = False) -> Folder:
        return await get_owned(self.crud, user_id, folder_id, "Folder", include_deleted=include_deleted)

    async def create_folder(self, user_id: str, name: str, parent_id: Optional[str] = None) -> Folder:
        """Create folder at the root or under an active parent owned by the same user"""
        name = clean_name(name, "Folder")

        parent = None
        if parent_id:
            parent = await get_owned(self.crud, user_id, parent_id, "Parent folder", include_deleted=True)
            if parent.deleted_at is not None:
                raise InvalidInputError("Cannot create a folder inside a folder that is in trash", field="parent_id")

        folder_create = FolderCreate(
            owner_id=user_id,
            name=name,
            parent_id=parent.id if parent else None,
            path=child_path(parent),
        )
        folder = await self.crud.create(obj_in=folder_create)

        logger.info(f"Folder created successfully: {folder.id}")
        await self.events.publish(
            "folder.create", owner_id=user_id, entity_id=str(folder.id),
            parent_id=str(parent.id) if parent else None,
        )
        return folder

    async def list_root_folders(self, user_id: str) -> List[Folder]:
        return await self.crud.get_root_folders(user_id)

    async def get_folder_detail(self, user_id: str, folder_id: str) -> FolderDetail:
        folder = await self.get_folder(user_id, folder_id)
        subfolders = await self.crud.get_children(user_id, folder.id)
        files = await self.file_crud.get_by_folder(folder.id, owner_id=user_id)
        breadcrumb = await self.tree.build_breadcrumb(folder.id, owner_id=user_id)
        return FolderDetail(folder=folder, subfolders=subfolders, files=files, breadcrumb=breadcrumb)

    async def rename_folder(self, user_id: str, folder_id: str, new_name: str) -> Folder:
        """Rename a folder.

        Descendant paths are not rewritten; path is display metadata and
        parent_id chains are what structure and access checks rely on.
        """
        new_name = clean_name(new_name, "Folder")
        folder = await self.get_folder(user_id, folder_id)
        old_name = folder.name
        folder = await self.crud.update(folder, {"name": new_name})

        await self.events.publish(
            "folder.rename", owner_id=user_id, entity_id=str(folder.id), old_name=old_name, new_name=new_name
        )
        return folder

    async def move_folder(self, user_id: str, folder_id: str, new_parent_id: Optional[str]) -> Folder:
        """Re-parent a folder; the target may not be the folder itself or below it"""
        folder = await self.get_folder(user_id, folder_id)

        new_parent = None
        if new_parent_id:
            new_parent = await self.get_folder(user_id, new_parent_id)
            if await self.tree.is_descendant(new_parent.id, folder.id):
                raise InvalidInputError("Cannot move a folder into itself or one of its subfolders", field="parent_id")

        folder = await self.crud.update(folder, {
            "parent_id": new_parent.id if new_parent else None,
            "path": child_path(new_parent),
        })

        await self.events.publish(
            "folder.move", owner_id=user_id, entity_id=str(folder.id),
            parent_id=str(new_parent.id) if new_parent else None,
        )
        return folder

    async def delete_folder(self, user_id: str, folder_id: str) -> CascadeResult:
        """Move a folder and everything below it to trash.

        Entities already in trash keep their own batch id, so restoring this
        folder later does not bring back things deleted independently before.
        The root is written first: if the cascade stops part way, calling
        delete again reuses the root's batch id and marks the stragglers.
        """
        folder = await self.get_folder(user_id, folder_id, include_deleted=True)
        batch_id = folder.trash_batch_id if folder.deleted_at is not None else uuid.uuid4().hex
        payload = {"is_deleted": True, "deleted_at": datetime.utcnow(), "trash_batch_id": batch_id}
        only_active = {"deleted_at": None}

        async with self.events.track("folder.delete", owner_id=user_id, entity_id=str(folder.id)) as event:
            subtree = await self.tree.collect_subtree(folder)
            files = await self.tree.collect_subtree_files(subtree)

            marked_root = await self.crud.update_many([folder.id], payload, only_active)
            marked_folders = await self.crud.update_many([f.id for f in subtree[1:]], payload, only_active)
            marked_files = await self.file_crud.update_many([f.id for f in files], payload, only_active)

            result = CascadeResult(folders=marked_root + marked_folders, files=marked_files)
            event.update(folders=result.folders, files=result.files, trash_batch_id=batch_id)

        logger.info(f"Folder {folder.id} moved to trash: {result.folders} folders, {result.files} files")
        return result

    async def restore_folder(self, user_id: str, folder_id: str) -> CascadeResult:
        """Bring back a trashed folder and whatever was trashed together with it.

        The parent must be active. The root is cleared last, so an interrupted
        restore leaves the root in trash and can simply be repeated.
        """
        folder = await self.get_folder(user_id, folder_id, include_deleted=True)
        if folder.deleted_at is None:
            raise NotFoundError("Folder not found in trash")

        if folder.parent_id is not None:
            parent = await self.crud.get_by_id(folder.parent_id)
            if parent is None or parent.deleted_at is not None:
                raise InvalidInputError("The parent folder is in trash; restore it first")

        payload = {"is_deleted": False, "deleted_at": None, "trash_batch_id": None}
        same_batch = {"deleted_at": {"$ne": None}, "trash_batch_id": folder.trash_batch_id}

        async with self.events.track("folder.restore", owner_id=user_id, entity_id=str(folder.id)) as event:
            subtree = await self.tree.collect_subtree(folder)
            files = await self.tree.collect_subtree_files(subtree)

            restored_files = await self.file_crud.update_many([f.id for f in files], payload, same_batch)
            restored_folders = await self.crud.update_many([f.id for f in subtree[1:]], payload, same_batch)
            restored_root = await self.crud.update_many([folder.id], payload, same_batch)

            result = CascadeResult(folders=restored_root + restored_folders, files=restored_files)
            event.update(folders=result.folders, files=result.files)

        logger.info(f"Folder {folder.id} restored: {result.folders} folders, {result.files} files")
        return result

    async def permanently_delete_folder(self, user_id: str, folder_id: str) -> CascadeResult:
        """Purge a trashed folder, every descendant and their stored bytes.

        Reaches descendants whatever their own trash state. Storage failures
        are logged and counted but never stop the metadata deletion. File
        records go first, folders last, so an interrupted purge leaves the
        root in trash to be purged again.
        """
        folder = await self.get_folder(user_id, folder_id, include_deleted=True)
        if folder.deleted_at is None:
            raise InvalidInputError("Folder must be in trash before it can be permanently deleted")

        async with self.events.track("folder.purge", owner_id=user_id, entity_id=str(folder.id)) as event:
            subtree = await self.tree.collect_subtree(folder)
            files = await self.tree.collect_subtree_files(subtree)

            storage_failures = 0
            for file in files:
                if not await self.file_service.release_storage(file):
                    storage_failures += 1

            deleted_files = await self.file_crud.delete_many(f.id for f in files)
            deleted_folders = await self.crud.delete_many(f.id for f in subtree)

            result = CascadeResult(folders=deleted_folders, files=deleted_files, storage_failures=storage_failures)
            event.update(folders=result.folders, files=result.files, storage_failures=storage_failures)

        logger.info(
            f"Folder {folder.id} permanently deleted: {result.folders} folders, {result.files} files, "
            f"{storage_failures} storage failures"
        )
        return result
