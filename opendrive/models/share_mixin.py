from typing import Optional
from pydantic import BaseModel, Field


class ShareMixin(BaseModel):
    is_shared: bool = Field(default=False, description="Public share link is active")
    share_id: Optional[str] = Field(
        default=None, description="Opaque public share token, set iff is_shared"
    )
