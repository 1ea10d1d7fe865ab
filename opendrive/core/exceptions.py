from typing import Any, Dict, List, Optional
from starlette import status

class AppError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        code: str = "bad_request",
        field: Optional[str] = None,
        errors: Optional[List[dict]] = None,  # [{'code':..., 'message':..., 'field':...}]
        details: Optional[Dict[str, Any]] = None,  # Additional details for the error
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.field = field
        self.errors = errors
        self.details = details


class NotFoundError(AppError):
    """Entity or storage key does not exist"""

    def __init__(self, message: str = "Not found", **kwargs):
        kwargs.setdefault("status_code", status.HTTP_404_NOT_FOUND)
        kwargs.setdefault("code", "not_found")
        super().__init__(message, **kwargs)


class ForbiddenError(AppError):
    """Owner mismatch, or a public request outside the shared subtree"""

    def __init__(self, message: str = "Access denied", **kwargs):
        kwargs.setdefault("status_code", status.HTTP_403_FORBIDDEN)
        kwargs.setdefault("code", "forbidden")
        super().__init__(message, **kwargs)


class InvalidInputError(AppError):
    def __init__(self, message: str = "Invalid input", **kwargs):
        kwargs.setdefault("status_code", status.HTTP_400_BAD_REQUEST)
        kwargs.setdefault("code", "invalid_input")
        super().__init__(message, **kwargs)


class StorageBackendError(AppError):
    """Any I/O failure reported by a storage provider"""

    def __init__(self, message: str = "Storage backend error", **kwargs):
        kwargs.setdefault("status_code", status.HTTP_502_BAD_GATEWAY)
        kwargs.setdefault("code", "storage_error")
        super().__init__(message, **kwargs)


class StructuralCorruptionError(AppError):
    """A cycle or broken chain in the folder tree.

    Never raised under correct operation; kept distinct from NotFoundError
    so operators can alert on it.
    """

    def __init__(self, message: str = "Folder tree is corrupted", **kwargs):
        kwargs.setdefault("status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
        kwargs.setdefault("code", "structural_corruption")
        super().__init__(message, **kwargs)
