from typing import Optional, Tuple

from opendrive.core.events import EventBus, event_bus as default_event_bus
from opendrive.core.exceptions import InvalidInputError, NotFoundError
from opendrive.crud.base import BaseCRUD
from opendrive.crud.file import FileCRUD, file_crud as default_file_crud
from opendrive.crud.folder import FolderCRUD, folder_crud as default_folder_crud
from opendrive.schemas import EntityKind, ShareLink
from opendrive.services.access import get_owned
from opendrive.utils import generate_share_token, get_logger

logger = get_logger(__name__)


class ShareService:
    """Issue and revoke public share links for files and folders.

    Tokens are stable: sharing an already shared entity returns its current
    token instead of rotating it, so links handed out earlier keep working.
    Only unshare invalidates a token; sharing again afterwards issues a new one.
    """

    def __init__(
        self,
        folder_crud: Optional[FolderCRUD] = None,
        file_crud: Optional[FileCRUD] = None,
        events: Optional[EventBus] = None,
    ):
        self.folder_crud = folder_crud or default_folder_crud
        self.file_crud = file_crud or default_file_crud
        self.events = events or default_event_bus

    def _resolve(self, kind) -> Tuple[EntityKind, BaseCRUD, str]:
        try:
            kind = EntityKind(kind)
        except ValueError:
            raise InvalidInputError(f"Unknown share kind: {kind}", field="kind")
        if kind == EntityKind.FOLDER:
            return kind, self.folder_crud, "Folder"
        return kind, self.file_crud, "File"

    async def share(self, user_id: str, entity_id: str, kind: EntityKind) -> ShareLink:
        kind, crud, label = self._resolve(kind)
        entity = await get_owned(crud, user_id, entity_id, label)

        if entity.is_shared and entity.share_id:
            return ShareLink(kind=kind, entity_id=str(entity.id), share_id=entity.share_id)

        # Two concurrent calls race on a conditional write; the first token
        # stored wins and both callers get it back.
        entity = await crud.claim_share_id(entity.id, generate_share_token())
        if entity is None or not entity.share_id:
            raise NotFoundError(f"{label} not found")

        logger.info(f"{label} share link generated: {entity.id}")
        await self.events.publish(
            f"{kind.value}.share", owner_id=user_id, entity_id=str(entity.id), share_id=entity.share_id
        )
        return ShareLink(kind=kind, entity_id=str(entity.id), share_id=entity.share_id)

    async def unshare(self, user_id: str, entity_id: str, kind: EntityKind):
        """Revoke the share link; the token is cleared so it can never resolve again"""
        kind, crud, label = self._resolve(kind)
        entity = await get_owned(crud, user_id, entity_id, label, include_deleted=True)

        old_share_id = entity.share_id
        entity = await crud.update(entity, {"is_shared": False, "share_id": None})

        logger.info(f"{label} share link revoked: {entity.id}")
        await self.events.publish(
            f"{kind.value}.unshare", owner_id=user_id, entity_id=str(entity.id), old_share_id=old_share_id
        )
        return entity
