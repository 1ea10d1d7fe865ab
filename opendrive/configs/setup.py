from dataclasses import dataclass
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient

from opendrive.configs.settings import Settings, settings
from opendrive.core.events import EventBus, event_bus
from opendrive.crud import file_crud, folder_crud
from opendrive.databases import mongodb
from opendrive.middlewares import init_sentry
from opendrive.models import DOCUMENT_MODELS
from opendrive.services import (
    FileService, FolderService, PublicService, SearchService, ShareService, TrashService, TreeService
)
from opendrive.storage import StorageProvider, StorageRegistry, get_storage
from opendrive.utils import setup_logging, get_logger

logger = get_logger(__name__)


@dataclass
class DriveContainer:
    """Wired services sharing one storage registry and event bus"""

    storage: StorageRegistry
    events: EventBus
    tree: TreeService
    files: FileService
    folders: FolderService
    shares: ShareService
    public: PublicService
    trash: TrashService
    search: SearchService


def build_container(
    storage: Optional[StorageProvider] = None,
    events: Optional[EventBus] = None,
    config: Optional[Settings] = None,
) -> DriveContainer:
    config = config or settings
    events = events or event_bus
    registry = StorageRegistry(storage or get_storage(config), config)

    tree = TreeService(folder_crud, file_crud)
    files = FileService(registry, file_crud, folder_crud, events, config.APP_MAX_FILE_SIZE)
    folders = FolderService(files, folder_crud, file_crud, tree, events)
    return DriveContainer(
        storage=registry,
        events=events,
        tree=tree,
        files=files,
        folders=folders,
        shares=ShareService(folder_crud, file_crud, events),
        public=PublicService(files, folder_crud, file_crud, tree, events),
        trash=TrashService(folders, files, folder_crud, file_crud),
        search=SearchService(folder_crud, file_crud),
    )


async def _setup_logging() -> None:
    """Setup application logging configuration"""
    setup_logging(
        level="DEBUG" if settings.APP_DEBUG else "INFO",
        app_name=settings.APP_NAME,
        enable_json=settings.APP_ENV == "prod",
        log_file="logs/app.log" if settings.APP_ENV == "prod" else None
    )
    logger.info("Logging configuration initialized")


async def _setup_sentry() -> None:
    """Setup Sentry monitoring for production environment"""
    if not settings.SENTRY_DSN:
        logger.warning("Sentry DSN not configured - monitoring disabled")
        return

    if settings.APP_ENV != "prod":
        logger.info("Sentry monitoring disabled - not in production environment")
        return

    try:
        init_sentry(
            dsn=settings.SENTRY_DSN,
            environment=settings.APP_ENV,
            release=settings.RELEASE,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            send_default_pii=settings.SENTRY_SEND_DEFAULT_PII
        )
        logger.info("Sentry monitoring initialized for production environment")
    except Exception as e:
        # Monitoring is optional; startup goes on without it
        logger.error(f"Failed to initialize Sentry: {str(e)}")


async def _setup_databases(client: Optional[AsyncIOMotorClient] = None) -> None:
    try:
        await mongodb.connect(document_models=DOCUMENT_MODELS, client=client)
        logger.info("MongoDB connection established successfully")
    except Exception as e:
        logger.error(f"Failed to initialize MongoDB: {str(e)}")
        raise


async def bootstrap(
    client: Optional[AsyncIOMotorClient] = None,
    storage: Optional[StorageProvider] = None,
    events: Optional[EventBus] = None,
) -> DriveContainer:
    """Start logging, monitoring and the database, then wire the services"""
    await _setup_logging()
    await _setup_sentry()
    await _setup_databases(client)

    container = build_container(storage=storage, events=events)
    logger.info(
        f"{settings.APP_NAME} started with {container.storage.default.provider_type} storage"
    )
    return container


async def shutdown() -> None:
    logger.info(f"Shutting down {settings.APP_NAME}...")
    try:
        await mongodb.disconnect()
        logger.info("Shutdown completed successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}")
