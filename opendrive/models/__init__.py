from opendrive.models.time_mixin import TimeMixin
from opendrive.models.soft_delete_mixin import SoftDeleteMixin
from opendrive.models.share_mixin import ShareMixin
from opendrive.models.folder import Folder
from opendrive.models.file import File

# Export all models for easy import
__all__ = [
    "TimeMixin",
    "SoftDeleteMixin",
    "ShareMixin",
    "Folder",
    "File",
]

# List of all document models for Beanie initialization
DOCUMENT_MODELS = [
    Folder,
    File,
]
