"""Upward and downward walks over the folder tree.

Only `parent_id` chains are authoritative for structure and access; the
materialized `path` on a folder is display metadata. Every walk carries a
visited set so a corrupted chain can never loop forever.
"""

from typing import List, Optional

from opendrive.core.exceptions import ForbiddenError, StructuralCorruptionError
from opendrive.crud.base import to_object_id
from opendrive.crud.file import FileCRUD, file_crud as default_file_crud
from opendrive.crud.folder import FolderCRUD, folder_crud as default_folder_crud
from opendrive.models.file import File
from opendrive.models.folder import Folder
from opendrive.schemas import BreadcrumbItem
from opendrive.utils import get_logger

logger = get_logger(__name__)


class TreeService:
    def __init__(self, folder_crud: Optional[FolderCRUD] = None, file_crud: Optional[FileCRUD] = None):
        self.folder_crud = folder_crud or default_folder_crud
        self.file_crud = file_crud or default_file_crud

    async def is_descendant(self, candidate_id, root_id) -> bool:
        """True iff root_id lies on candidate_id's parent chain.

        A folder counts as its own descendant. Cycles and broken chains
        answer False rather than raising.
        """
        candidate = to_object_id(candidate_id)
        root = to_object_id(root_id)
        if candidate is None or root is None:
            return False

        visited = set()
        current = candidate
        while current is not None:
            if current == root:
                return True
            if current in visited:
                logger.error(f"Cycle detected in folder chain of {candidate} at {current}")
                return False
            visited.add(current)

            folder = await self.folder_crud.get_by_id(current)
            if folder is None:
                return False
            current = folder.parent_id
        return False

    async def build_breadcrumb(self, leaf_id, root_id=None, owner_id: Optional[str] = None) -> List[BreadcrumbItem]:
        """Ancestor chain as [{id, name}] from the top down to leaf_id.

        With root_id the walk stops at that folder, and a chain that ends
        without reaching it raises ForbiddenError: the leaf is outside the
        subtree. With owner_id, folders of another owner end the chain.
        """
        root = to_object_id(root_id) if root_id is not None else None
        breadcrumb: List[BreadcrumbItem] = []
        visited = set()
        current = to_object_id(leaf_id)

        while current is not None:
            if current in visited:
                raise StructuralCorruptionError(
                    f"Cycle detected while building breadcrumb for {leaf_id}",
                    details={"folder_id": str(current)},
                )
            visited.add(current)

            folder = await self.folder_crud.get_by_id(current)
            if folder is None or (owner_id is not None and folder.owner_id != owner_id):
                if root is None and breadcrumb:
                    logger.warning(f"Breadcrumb for {leaf_id} stopped at missing folder {current}")
                break

            breadcrumb.insert(0, BreadcrumbItem(id=str(folder.id), name=folder.name))
            if root is not None and folder.id == root:
                return breadcrumb
            current = folder.parent_id

        if root is not None:
            raise ForbiddenError("Folder is outside the shared folder")
        return breadcrumb

    async def collect_subtree(self, root: Folder) -> List[Folder]:
        """Root plus every descendant folder of the same owner, trashed or not.

        Breadth first, one query per level.
        """
        subtree = [root]
        visited = {root.id}
        frontier = [root.id]
        while frontier:
            children = await self.folder_crud.get_children_of_many(frontier)
            frontier = []
            for child in children:
                if child.owner_id != root.owner_id:
                    logger.error(f"Folder {child.id} of another owner found under {child.parent_id}")
                    continue
                if child.id in visited:
                    raise StructuralCorruptionError(
                        f"Cycle detected below folder {root.id}",
                        details={"folder_id": str(child.id)},
                    )
                visited.add(child.id)
                subtree.append(child)
                frontier.append(child.id)
        return subtree

    async def collect_subtree_files(self, folders: List[Folder]) -> List[File]:
        """Every file of the subtree owner inside any of the given folders"""
        if not folders:
            return []
        owner_id = folders[0].owner_id
        files = await self.file_crud.get_in_folders(f.id for f in folders)
        return [f for f in files if f.owner_id == owner_id]
