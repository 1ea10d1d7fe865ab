import mimetypes
import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from starlette import status

from opendrive.configs.settings import settings
from opendrive.core.events import EventBus, event_bus as default_event_bus
from opendrive.core.exceptions import AppError, InvalidInputError, NotFoundError, StorageBackendError
from opendrive.crud.file import FileCRUD, file_crud as default_file_crud
from opendrive.crud.folder import FolderCRUD, folder_crud as default_folder_crud
from opendrive.models.file import File
from opendrive.schemas.file import BatchUploadResult, DownloadedFile, FileCreate, UploadFailure
from opendrive.services.access import clean_name, get_owned
from opendrive.storage.factory import StorageRegistry
from opendrive.utils import get_logger

logger = get_logger(__name__)

# Files accepted by one batch upload call
MAX_BATCH_FILES = 10


class FileService:
    def __init__(
        self,
        storage: StorageRegistry,
        crud: Optional[FileCRUD] = None,
        folder_crud: Optional[FolderCRUD] = None,
        events: Optional[EventBus] = None,
        max_file_size: Optional[int] = None,
    ):
        self.storage = storage
        self.crud = crud or default_file_crud
        self.folder_crud = folder_crud or default_folder_crud
        self.events = events or default_event_bus
        self.max_file_size = max_file_size if max_file_size is not None else settings.APP_MAX_FILE_SIZE

    def _resolve_mime_type(self, original_name: str, mime_type: Optional[str]) -> str:
        if mime_type and mime_type != "application/octet-stream":
            return mime_type
        guessed_type, _ = mimetypes.guess_type(original_name)
        return guessed_type or mime_type or "application/octet-stream"

    async def upload_file(
        self, user_id: str, folder_id: str, original_name: str, data: bytes, mime_type: Optional[str] = None
    ) -> File:
        """Store bytes with the default provider, then record the file.

        If the record cannot be written the stored object is deleted again so
        the backend does not keep an orphan.
        """
        original_name = clean_name(original_name, "File")
        folder = await get_owned(self.folder_crud, user_id, folder_id, "Folder")
        if len(data) > self.max_file_size:
            raise InvalidInputError(
                f"File exceeds the maximum size of {self.max_file_size} bytes", field="file"
            )

        provider = self.storage.default
        mime_type = self._resolve_mime_type(original_name, mime_type)

        async with self.events.track(
            "file.upload", owner_id=user_id, folder_id=str(folder.id),
            file_name=original_name, storage_provider=provider.provider_type,
        ) as event:
            async with self.events.track("storage.upload", owner_id=user_id,
                                         storage_provider=provider.provider_type) as storage_event:
                stored = await provider.upload(original_name, data, mime_type, user_id)
                storage_event.update(storage_key=stored.key, size=stored.size)

            file_create = FileCreate(
                owner_id=user_id,
                folder_id=folder.id,
                name=f"{uuid.uuid4()}-{original_name}",
                original_name=original_name,
                storage_key=stored.key,
                storage_provider=provider.provider_type,
                mime_type=mime_type,
                size=stored.size,
            )
            try:
                file = await self.crud.create(obj_in=file_create)
            except Exception as e:
                logger.error(f"Failed to record uploaded file {stored.key}, rolling back storage: {e}", exc_info=True)
                try:
                    await provider.delete(stored.key)
                except AppError as cleanup_error:
                    logger.error(f"Failed to clean up stored object {stored.key}: {cleanup_error.message}")
                if isinstance(e, AppError):
                    raise
                raise AppError(
                    f"Failed to record uploaded file: {e}",
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    code="upload_failed",
                ) from e

            event.update(entity_id=str(file.id), size=file.size, storage_key=file.storage_key)

        logger.info(f"File uploaded successfully: {file.id} ({file.size} bytes)")
        return file

    async def upload_files(
        self, user_id: str, folder_id: str, uploads: Iterable[Tuple[str, bytes, Optional[str]]]
    ) -> BatchUploadResult:
        """Upload several files; each failure is collected, not raised.

        Raises only when nothing could be uploaded at all, or when the batch
        holds more than MAX_BATCH_FILES files.
        """
        uploads = list(uploads)
        if len(uploads) > MAX_BATCH_FILES:
            raise InvalidInputError(
                f"At most {MAX_BATCH_FILES} files can be uploaded at once", field="files"
            )

        results = BatchUploadResult()
        for original_name, data, mime_type in uploads:
            try:
                file = await self.upload_file(user_id, folder_id, original_name, data, mime_type)
                results.files.append(file)
            except AppError as e:
                logger.error(f"Upload of {original_name} failed: {e.message}")
                results.errors.append(UploadFailure(file_name=original_name or "", error=e.message))
            except Exception as e:
                logger.error(f"Upload of {original_name} failed: {str(e)}", exc_info=True)
                results.errors.append(UploadFailure(file_name=original_name or "", error=str(e)))

        if not results.files and results.errors:
            raise StorageBackendError(
                "All uploads failed",
                errors=[{"code": "upload_failed", "message": f.error, "field": f.file_name} for f in results.errors],
            )

        logger.info(f"Batch upload completed: {results.success} successful, {results.failed} failed")
        return results

    async def list_folder_files(self, user_id: str, folder_id: str) -> List[File]:
        folder = await get_owned(self.folder_crud, user_id, folder_id, "Folder")
        return await self.crud.get_by_folder(folder.id, owner_id=user_id)

    async def get_file(self, user_id: str, file_id: str) -> File:
        return await get_owned(self.crud, user_id, file_id, "File")

    async def read_bytes(self, file: File) -> DownloadedFile:
        """Fetch bytes from the provider recorded on the file, not the current default"""
        provider = self.storage.for_type(file.storage_provider)
        async with self.events.track(
            "storage.download", owner_id=file.owner_id, entity_id=str(file.id),
            storage_key=file.storage_key, storage_provider=provider.provider_type,
        ) as event:
            content = await provider.download(file.storage_key)
            event.update(size=len(content))

        return DownloadedFile(
            file_id=str(file.id),
            file_name=file.original_name,
            mime_type=file.mime_type,
            size=len(content),
            content=content,
        )

    async def download_file(self, user_id: str, file_id: str) -> DownloadedFile:
        file = await self.get_file(user_id, file_id)
        async with self.events.track("file.download", owner_id=user_id, entity_id=str(file.id)) as event:
            downloaded = await self.read_bytes(file)
            event.update(size=downloaded.size)
        return downloaded

    async def rename_file(self, user_id: str, file_id: str, new_name: str) -> File:
        """Rename file (only update database, keep the stored object unchanged)"""
        new_name = clean_name(new_name, "File")
        file = await self.get_file(user_id, file_id)
        old_name = file.original_name
        file = await self.crud.update(file, {"original_name": new_name})
        await self.events.publish(
            "file.rename", owner_id=user_id, entity_id=str(file.id), old_name=old_name, new_name=new_name
        )
        return file

    async def delete_file(self, user_id: str, file_id: str) -> File:
        """Move a file to trash"""
        file = await self.get_file(user_id, file_id)
        file = await self.crud.update(file, {
            "is_deleted": True,
            "deleted_at": datetime.utcnow(),
            "trash_batch_id": uuid.uuid4().hex,
        })
        await self.events.publish("file.delete", owner_id=user_id, entity_id=str(file.id), size=file.size)
        return file

    async def restore_file(self, user_id: str, file_id: str) -> File:
        file = await get_owned(self.crud, user_id, file_id, "File", include_deleted=True)
        if file.deleted_at is None:
            raise NotFoundError("File not found in trash")

        folder = await self.folder_crud.get_by_id(file.folder_id)
        if folder is None or folder.deleted_at is not None:
            raise InvalidInputError("The file's folder is in trash; restore the folder first")

        file = await self.crud.update(file, {"is_deleted": False, "deleted_at": None, "trash_batch_id": None})
        await self.events.publish(
            "file.restore", owner_id=user_id, entity_id=str(file.id), folder_id=str(file.folder_id)
        )
        return file

    async def release_storage(self, file: File) -> bool:
        """Best-effort delete of a file's bytes.

        A missing object counts as released. Any other failure is logged and
        reported as False so that metadata deletion can still go ahead; an
        orphaned object is preferred over a trash entry that cannot be purged.
        """
        try:
            provider = self.storage.for_type(file.storage_provider)
            async with self.events.track(
                "storage.delete", owner_id=file.owner_id, entity_id=str(file.id),
                storage_key=file.storage_key, storage_provider=provider.provider_type,
            ):
                await provider.delete(file.storage_key)
            return True
        except NotFoundError:
            return True
        except AppError as e:
            logger.warning(
                f"Storage deletion failed for {file.storage_key}, continuing with metadata deletion: {e.message}"
            )
            return False
        except Exception as e:
            logger.error(
                f"Storage deletion failed for {file.storage_key}, continuing with metadata deletion: {str(e)}",
                exc_info=True,
            )
            return False

    async def permanently_delete_file(self, user_id: str, file_id: str) -> bool:
        file = await get_owned(self.crud, user_id, file_id, "File", include_deleted=True)
        if file.deleted_at is None:
            raise NotFoundError("File not found in trash")

        released = await self.release_storage(file)
        await self.crud.delete(file)
        await self.events.publish(
            "file.purge", owner_id=user_id, entity_id=str(file.id), size=file.size,
            storage_key=file.storage_key, storage_released=released,
        )
        logger.info(f"File permanently deleted: {file.id}")
        return released
