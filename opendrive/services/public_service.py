"""Read-only, unauthenticated access to shared files and folder subtrees.

Every refusal raises the same NotFoundError with the same message: a revoked
token, an unknown token and a request outside the shared subtree must look
identical to the caller.
"""

from typing import Optional

from opendrive.core.events import EventBus, event_bus as default_event_bus
from opendrive.core.exceptions import ForbiddenError, NotFoundError
from opendrive.crud.file import FileCRUD, file_crud as default_file_crud
from opendrive.crud.folder import FolderCRUD, folder_crud as default_folder_crud
from opendrive.models.file import File
from opendrive.models.folder import Folder
from opendrive.schemas import DownloadedFile, EntityKind, PublicFolderView, SharedResource
from opendrive.services.file_service import FileService
from opendrive.services.tree_service import TreeService
from opendrive.utils import get_logger

logger = get_logger(__name__)

PUBLIC_NOT_FOUND = "Shared resource not found or access denied"


def _denied() -> NotFoundError:
    return NotFoundError(PUBLIC_NOT_FOUND, code="share_not_found")


class PublicService:
    def __init__(
        self,
        file_service: FileService,
        folder_crud: Optional[FolderCRUD] = None,
        file_crud: Optional[FileCRUD] = None,
        tree: Optional[TreeService] = None,
        events: Optional[EventBus] = None,
    ):
        self.file_service = file_service
        self.folder_crud = folder_crud or default_folder_crud
        self.file_crud = file_crud or default_file_crud
        self.tree = tree or TreeService(self.folder_crud, self.file_crud)
        self.events = events or default_event_bus

    async def resolve_share(self, share_id: str) -> SharedResource:
        """Look the token up among folders first, then files"""
        if not share_id:
            raise _denied()

        folder = await self.folder_crud.get_by_share_id(share_id)
        if folder is not None:
            return SharedResource(kind=EntityKind.FOLDER, folder=folder)

        file = await self.file_crud.get_by_share_id(share_id)
        if file is not None:
            return SharedResource(kind=EntityKind.FILE, file=file)

        logger.info("Public request for unknown or revoked share token")
        raise _denied()

    async def _shared_root(self, share_id: str) -> Folder:
        resource = await self.resolve_share(share_id)
        if resource.kind != EntityKind.FOLDER:
            raise _denied()
        return resource.folder

    async def _contained_folder(self, root: Folder, folder_id) -> Folder:
        folder = await self.folder_crud.get_by_id(folder_id, include_deleted=False)
        if folder is None or folder.owner_id != root.owner_id:
            raise _denied()
        if not await self.tree.is_descendant(folder.id, root.id):
            logger.warning(f"Public request for folder {folder.id} outside shared root {root.id}")
            raise _denied()
        return folder

    async def list_shared_folder(self, share_id: str, subfolder_id: Optional[str] = None) -> PublicFolderView:
        """Contents of the shared folder, or of a folder inside its subtree"""
        root = await self._shared_root(share_id)
        folder = root if subfolder_id is None else await self._contained_folder(root, subfolder_id)

        try:
            breadcrumb = await self.tree.build_breadcrumb(folder.id, root_id=root.id)
        except ForbiddenError:
            raise _denied()

        subfolders = await self.folder_crud.get_children(root.owner_id, folder.id)
        files = await self.file_crud.get_by_folder(folder.id, owner_id=root.owner_id)
        return PublicFolderView(root=root, folder=folder, subfolders=subfolders, files=files, breadcrumb=breadcrumb)

    async def _shared_file(self, share_id: str, file_id: Optional[str]) -> File:
        resource = await self.resolve_share(share_id)

        if resource.kind == EntityKind.FILE:
            # A direct file share exposes that one file only
            if file_id is not None and str(file_id) != str(resource.file.id):
                raise _denied()
            return resource.file

        if file_id is None:
            raise _denied()
        root = resource.folder
        file = await self.file_crud.get_by_id(file_id, include_deleted=False)
        if file is None or file.owner_id != root.owner_id:
            raise _denied()
        if not await self.tree.is_descendant(file.folder_id, root.id):
            logger.warning(f"Public request for file {file.id} outside shared root {root.id}")
            raise _denied()
        return file

    async def download_shared_file(self, share_id: str, file_id: Optional[str] = None) -> DownloadedFile:
        file = await self._shared_file(share_id, file_id)
        async with self.events.track(
            "file.download", owner_id=file.owner_id, entity_id=str(file.id), public=True
        ) as event:
            downloaded = await self.file_service.read_bytes(file)
            event.update(size=downloaded.size)
        return downloaded
