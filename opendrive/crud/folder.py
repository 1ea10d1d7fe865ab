import re
from opendrive.crud.base import BaseCRUD
from opendrive.models.folder import Folder
from opendrive.schemas import FolderCreate, FolderUpdate
from bson import ObjectId
from typing import Iterable, List, Optional

class FolderCRUD(BaseCRUD[Folder, FolderCreate, FolderUpdate]):
    def __init__(self):
        super().__init__(Folder)

    async def get_root_folders(self, owner_id: str) -> List[Folder]:
        """Get active folders without a parent"""
        return await self.model.find({
            "owner_id": owner_id,
            "parent_id": None,
            "deleted_at": None
        }).sort("-created_at").to_list()

    async def get_children(self, owner_id: str, parent_id: ObjectId, include_deleted: bool = False) -> List[Folder]:
        """Get direct subfolders of a folder"""
        query = {
            "owner_id": owner_id,
            "parent_id": parent_id,
        }
        if not include_deleted:
            query["deleted_at"] = None
        return await self.model.find(query).sort("-created_at").to_list()

    async def get_children_of_many(self, parent_ids: Iterable[ObjectId]) -> List[Folder]:
        """Get every folder whose parent is in parent_ids, trashed or not"""
        parent_ids = list(parent_ids)
        if not parent_ids:
            return []
        return await self.model.find({"parent_id": {"$in": parent_ids}}).to_list()

    async def get_by_share_id(self, share_id: str) -> Optional[Folder]:
        """Get an active, shared folder by its public token"""
        return await self.model.find_one({
            "share_id": share_id,
            "is_shared": True,
            "deleted_at": None
        })

    async def get_trashed(self, owner_id: str) -> List[Folder]:
        return await self.model.find({
            "owner_id": owner_id,
            "deleted_at": {"$ne": None}
        }).sort("-deleted_at").to_list()

    async def search_folders_by_name(self, owner_id: str, search_term: str, limit: int = 50) -> List[Folder]:
        """Search folders by name pattern"""
        query = {
            "owner_id": owner_id,
            "name": {"$regex": re.escape(search_term), "$options": "i"},
            "deleted_at": None
        }
        return await self.model.find(query).sort("name").limit(limit).to_list()


folder_crud = FolderCRUD()
