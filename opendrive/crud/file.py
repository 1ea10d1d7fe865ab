import re
from opendrive.crud.base import BaseCRUD
from opendrive.models.file import File
from opendrive.schemas.file import FileCreate, FileUpdate
from bson import ObjectId
from typing import Iterable, List, Optional


class FileCRUD(BaseCRUD[File, FileCreate, FileUpdate]):
    def __init__(self):
        super().__init__(File)

    async def get_by_folder(self, folder_id: ObjectId, owner_id: Optional[str] = None) -> List[File]:
        """Get active files directly inside a folder"""
        query = {"folder_id": folder_id, "deleted_at": None}
        if owner_id is not None:
            query["owner_id"] = owner_id
        return await self.model.find(query).sort("-created_at").to_list()

    async def get_in_folders(self, folder_ids: Iterable[ObjectId]) -> List[File]:
        """Get every file inside any of folder_ids, trashed or not"""
        folder_ids = list(folder_ids)
        if not folder_ids:
            return []
        return await self.model.find({"folder_id": {"$in": folder_ids}}).to_list()

    async def get_by_share_id(self, share_id: str) -> Optional[File]:
        """Get an active, shared file by its public token"""
        return await self.model.find_one({
            "share_id": share_id,
            "is_shared": True,
            "deleted_at": None
        })

    async def get_trashed(self, owner_id: str) -> List[File]:
        return await self.model.find({
            "owner_id": owner_id,
            "deleted_at": {"$ne": None}
        }).sort("-deleted_at").to_list()

    async def search_files_by_name(self, owner_id: str, search_term: str, limit: int = 50) -> List[File]:
        """Search files by generated or original name"""
        pattern = {"$regex": re.escape(search_term), "$options": "i"}
        query = {
            "owner_id": owner_id,
            "deleted_at": None,
            "$or": [{"name": pattern}, {"original_name": pattern}]
        }
        return await self.model.find(query).sort("original_name").limit(limit).to_list()


file_crud = FileCRUD()
