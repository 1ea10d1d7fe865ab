from typing import Optional, Annotated
import pymongo
from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field
from opendrive.models.time_mixin import TimeMixin
from opendrive.models.soft_delete_mixin import SoftDeleteMixin
from opendrive.models.share_mixin import ShareMixin


class Folder(Document, TimeMixin, SoftDeleteMixin, ShareMixin):
    """Folder node of a user's tree in MongoDB"""

    owner_id: Annotated[str, Indexed(str)] = Field(..., description="User who owns the folder")
    name: Annotated[str, Indexed(str)] = Field(..., min_length=1, description="Folder name")
    parent_id: Optional[PydanticObjectId] = Field(
        default=None, description="Parent folder id, null for root folders"
    )
    path: str = Field(default="/", description="Display path of the parent chain, e.g. /Documents/Projects/")

    class Settings:
        name = "folders"
        indexes = [
            [("owner_id", pymongo.ASCENDING), ("deleted_at", pymongo.ASCENDING)],
            "parent_id",
            # Not unique: unset tokens are null on most documents, and
            # 128-bit random tokens make collisions negligible.
            "share_id",
        ]
