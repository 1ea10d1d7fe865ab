"""Tests for application bootstrap and wiring."""

import logging
from unittest.mock import MagicMock

import pytest
from mongomock_motor import AsyncMongoMockClient

from opendrive.configs.setup import DriveContainer, bootstrap, shutdown
from opendrive.core.events import EventBus
from opendrive.databases import mongodb
from opendrive.middlewares.sentry import _strip_sensitive
from opendrive.storage.local import LocalStorageProvider

OWNER = "user-a"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    package_level = logging.getLogger("opendrive").level
    yield root
    logging.getLogger("opendrive").setLevel(package_level)
    root.handlers[:] = handlers
    root.setLevel(level)


class TestBootstrap:
    async def test_bootstrap_wires_services(self, tmp_path, restore_root_logger):
        bus = EventBus(log_events=False)
        container = await bootstrap(
            client=AsyncMongoMockClient(),
            storage=LocalStorageProvider(str(tmp_path)),
            events=bus,
        )
        try:
            assert isinstance(container, DriveContainer)
            assert container.events is bus
            assert container.folders.file_service is container.files
            assert container.public.tree is container.tree
            assert container.storage.default.provider_type == "local"

            folder = await container.folders.create_folder(OWNER, "Docs")
            file = await container.files.upload_file(OWNER, str(folder.id), "a.txt", b"a")
            assert (await container.files.download_file(OWNER, str(file.id))).content == b"a"
        finally:
            mongodb.client = None
            mongodb.database = None

    async def test_shutdown_closes_client(self):
        client = MagicMock()
        mongodb.client = client
        await shutdown()
        client.close.assert_called_once()
        assert mongodb.client is None


class TestSentryScrubbing:
    def test_sensitive_fields_filtered(self):
        event = {
            "extra": {"share_id": "abc", "entity_id": "f1"},
            "breadcrumbs": {"values": [{"data": {"secret_key": "s", "size": 1}}]},
        }
        scrubbed = _strip_sensitive(event, None)
        assert scrubbed["extra"] == {"share_id": "[Filtered]", "entity_id": "f1"}
        assert scrubbed["breadcrumbs"]["values"][0]["data"] == {"secret_key": "[Filtered]", "size": 1}

    def test_nested_telemetry_payload_filtered(self):
        event = {
            "extra": {"event": {"operation": "file.purge", "storage_key": "u/2024/01/01/k"}},
            "breadcrumbs": {"values": [
                {"data": {"event": {"operation": "file.share", "share_id": "tok123"}}},
                {"data": {"event": {"operation": "folder.unshare", "old_share_id": "tok456"}}},
            ]},
        }
        scrubbed = _strip_sensitive(event, None)
        assert scrubbed["extra"]["event"] == {"operation": "file.purge", "storage_key": "[Filtered]"}
        crumbs = [b["data"]["event"] for b in scrubbed["breadcrumbs"]["values"]]
        assert crumbs[0] == {"operation": "file.share", "share_id": "[Filtered]"}
        assert crumbs[1]["old_share_id"] == "[Filtered]"

    def test_missing_sections_tolerated(self):
        assert _strip_sensitive({"message": "boom"}, None) == {"message": "boom"}
