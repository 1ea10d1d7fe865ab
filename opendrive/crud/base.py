from datetime import datetime
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar
from bson import ObjectId
from bson.errors import InvalidId
from beanie import Document
from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=Document)
CreateSchemaT = TypeVar("CreateSchemaT", bound=BaseModel)
UpdateSchemaT = TypeVar("UpdateSchemaT", bound=BaseModel)


def to_object_id(id: Any) -> Optional[ObjectId]:
    """Parse an id coming from a caller; malformed ids yield None."""
    if isinstance(id, ObjectId):
        return id
    try:
        return ObjectId(str(id))
    except (InvalidId, TypeError):
        return None


class BaseCRUD(Generic[ModelT, CreateSchemaT, UpdateSchemaT]):
    def __init__(self, model: Type[ModelT]):
        self.model = model

    async def get_by_id(self, id: Any, include_deleted: bool = True) -> Optional[ModelT]:
        object_id = to_object_id(id)
        if object_id is None:
            return None
        query = {"_id": object_id}
        if not include_deleted and "deleted_at" in self.model.model_fields:
            query["deleted_at"] = None
        return await self.model.find_one(query)

    async def get_one(
        self, filter_: Dict[str, Any], include_deleted: bool = True
    ) -> Optional[ModelT]:
        query = dict(filter_)
        if not include_deleted and "deleted_at" in self.model.model_fields:
            query["deleted_at"] = None
        return await self.model.find_one(query)

    async def list(
        self,
        filter_: Optional[Dict[str, Any]] = None,
        limit: int = 0,
        skip: int = 0,
        include_deleted: bool = True,
        sort: Optional[str] = None,
    ) -> List[ModelT]:
        query = dict(filter_ or {})
        if not include_deleted and "deleted_at" in self.model.model_fields:
            query["deleted_at"] = None
        cursor = self.model.find(query)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list()

    async def create(self, obj_in: CreateSchemaT) -> ModelT:
        data = obj_in.model_dump()
        if "is_deleted" in self.model.model_fields:
            data.setdefault("is_deleted", False)
            data.setdefault("deleted_at", None)
        db_obj = self.model(**data)
        await db_obj.insert()
        return db_obj

    async def update(
        self,
        db_obj: ModelT,
        obj_in: UpdateSchemaT | Dict[str, Any],
    ) -> ModelT:
        if isinstance(obj_in, BaseModel):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            # Plain dicts are applied as given so fields can be cleared to None
            update_data = dict(obj_in)

        if "updated_at" in self.model.model_fields:
            update_data["updated_at"] = datetime.utcnow()

        await db_obj.set(update_data)
        # Beanie's merge skips None values; cleared fields must show locally too
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        return db_obj

    async def update_many(self, ids: Iterable[ObjectId], payload: Dict[str, Any], extra_filter: Optional[Dict[str, Any]] = None) -> int:
        """Apply one $set to every document in `ids` matching `extra_filter`.

        A single multi-document write; MongoDB applies it per document, so a
        failure part way through leaves the rest untouched.
        """
        ids = list(ids)
        if not ids:
            return 0
        query = {"_id": {"$in": ids}, **(extra_filter or {})}
        payload = dict(payload)
        if "updated_at" in self.model.model_fields:
            payload["updated_at"] = datetime.utcnow()
        result = await self.model.find(query).update_many({"$set": payload})
        return result.modified_count if result is not None else 0

    async def delete(self, db_obj: ModelT) -> None:
        await db_obj.delete()

    async def delete_many(self, ids: Iterable[ObjectId]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        result = await self.model.find({"_id": {"$in": ids}}).delete()
        return result.deleted_count if result is not None else 0

    async def claim_share_id(self, id: ObjectId, share_id: str) -> Optional[ModelT]:
        """Set a share token only if none is set yet, then re-read.

        The conditional write makes the first concurrent caller's token the
        authoritative one; later callers read it back instead of overwriting.
        """
        await self.model.find_one({"_id": id, "share_id": None}).update({
            "$set": {"is_shared": True, "share_id": share_id, "updated_at": datetime.utcnow()}
        })
        return await self.get_by_id(id)
