"""Shared fixtures for OpenDrive tests."""

import pytest
from beanie import init_beanie
from mongomock_motor import AsyncMongoMockClient

from opendrive.configs.setup import DriveContainer, build_container
from opendrive.core.events import DriveEvent, EventBus
from opendrive.models import DOCUMENT_MODELS
from opendrive.storage.local import LocalStorageProvider

OWNER = "user-a"
OTHER = "user-b"


@pytest.fixture
async def db():
    """In-memory MongoDB with the Beanie document models initialized."""
    client = AsyncMongoMockClient()
    database = client["opendrive_test"]
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    yield database


@pytest.fixture
def storage(tmp_path) -> LocalStorageProvider:
    return LocalStorageProvider(base_path=str(tmp_path / "uploads"))


@pytest.fixture
def recorded_events() -> list:
    return []


@pytest.fixture
def events(recorded_events) -> EventBus:
    """Event bus whose handler records every event in `recorded_events`."""
    bus = EventBus(log_events=False)

    async def record(event: DriveEvent) -> None:
        recorded_events.append(event)

    bus.register(record)
    return bus


@pytest.fixture
def drive(db, storage, events) -> DriveContainer:
    return build_container(storage=storage, events=events)


@pytest.fixture
async def docs_tree(drive):
    """Docs/Projects with a.txt in Projects, owned by OWNER."""
    docs = await drive.folders.create_folder(OWNER, "Docs")
    projects = await drive.folders.create_folder(OWNER, "Projects", str(docs.id))
    a_txt = await drive.files.upload_file(OWNER, str(projects.id), "a.txt", b"hello", "text/plain")
    return docs, projects, a_txt
