from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class SoftDeleteMixin(BaseModel):
    is_deleted: bool = Field(
        default=False, description="Soft delete flag"
    )
    deleted_at: Optional[datetime] = Field(
        default=None, description="Deletion timestamp"
    )
    trash_batch_id: Optional[str] = Field(
        default=None, description="Id of the soft-delete operation that trashed this entity"
    )

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None
