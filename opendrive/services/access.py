from opendrive.core.exceptions import ForbiddenError, InvalidInputError, NotFoundError
from opendrive.crud.base import BaseCRUD


async def get_owned(crud: BaseCRUD, owner_id: str, entity_id, label: str, include_deleted: bool = False):
    """Load an entity and enforce that owner_id owns it.

    Trashed entities count as missing unless include_deleted is set, which
    is how restore and permanent delete address them.
    """
    entity = await crud.get_by_id(entity_id)
    if entity is None:
        raise NotFoundError(f"{label} not found")
    if entity.owner_id != owner_id:
        raise ForbiddenError(f"{label} belongs to another user")
    if entity.deleted_at is not None and not include_deleted:
        raise NotFoundError(f"{label} not found")
    return entity


def clean_name(name: str, label: str) -> str:
    """Trim a user supplied name and reject empty ones"""
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidInputError(f"{label} name is required", field="name")
    return cleaned
