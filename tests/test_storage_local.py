"""Tests for the local disk storage provider."""

import re
from datetime import datetime
from pathlib import Path

import pytest

from opendrive.core.exceptions import InvalidInputError, NotFoundError
from opendrive.storage import StorageProvider, generate_storage_key
from opendrive.storage.local import LocalStorageProvider


@pytest.fixture
def provider(tmp_path) -> LocalStorageProvider:
    return LocalStorageProvider(base_path=str(tmp_path))


# ---------------------------------------------------------------------------
# Key generation
# ---------------------------------------------------------------------------


class TestStorageKey:
    def test_layout(self):
        key = generate_storage_key("report.pdf", "user-a", now=datetime(2024, 3, 7))
        assert re.fullmatch(r"user-a/2024/03/07/[0-9a-f\-]{36}-report\.pdf", key)

    def test_unsafe_characters_replaced(self):
        key = generate_storage_key("my report (final).tar gz", "u1")
        assert key.endswith("-my_report__final_.tar_gz")

    def test_directory_components_dropped(self):
        key = generate_storage_key("../../etc/passwd", "u1")
        assert ".." not in key
        assert key.endswith("-passwd")

    def test_keys_are_unique(self):
        assert generate_storage_key("a.txt", "u1") != generate_storage_key("a.txt", "u1")


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------


class TestLocalRoundTrip:
    def test_satisfies_protocol(self, provider):
        assert isinstance(provider, StorageProvider)
        assert provider.provider_type == "local"

    async def test_upload_then_download(self, provider, tmp_path):
        stored = await provider.upload("notes.txt", b"some bytes", "text/plain", "user-a")
        assert stored.size == 10
        assert stored.key.startswith("user-a/")
        assert (tmp_path / stored.key).read_bytes() == b"some bytes"
        assert await provider.download(stored.key) == b"some bytes"

    async def test_zero_byte_file(self, provider):
        stored = await provider.upload("empty.bin", b"", "application/octet-stream", "user-a")
        assert stored.size == 0
        assert await provider.download(stored.key) == b""
        assert await provider.exists(stored.key)

    async def test_no_temp_files_left(self, provider, tmp_path):
        stored = await provider.upload("a.txt", b"x", "text/plain", "user-a")
        siblings = list(Path(tmp_path / stored.key).parent.iterdir())
        assert [p.suffix for p in siblings] == [".txt"]


# ---------------------------------------------------------------------------
# Missing keys and errors
# ---------------------------------------------------------------------------


class TestLocalMissingKeys:
    async def test_download_missing_raises_not_found(self, provider):
        with pytest.raises(NotFoundError):
            await provider.download("user-a/2024/01/01/missing.txt")

    async def test_delete_is_idempotent(self, provider):
        stored = await provider.upload("a.txt", b"x", "text/plain", "user-a")
        await provider.delete(stored.key)
        await provider.delete(stored.key)
        assert not await provider.exists(stored.key)

    async def test_exists_false_for_missing(self, provider):
        assert await provider.exists("nope/never.txt") is False

    async def test_exists_never_raises_on_escaping_key(self, provider):
        assert await provider.exists("../../outside.txt") is False

    async def test_escaping_key_rejected(self, provider):
        with pytest.raises(InvalidInputError):
            await provider.download("../../outside.txt")
