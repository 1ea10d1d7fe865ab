"""Tests for the S3-compatible provider against a mocked MinIO client."""

from unittest.mock import MagicMock

import pytest
from minio.error import S3Error

from opendrive.core.exceptions import NotFoundError, StorageBackendError
from opendrive.storage.s3 import S3StorageProvider


class FakeS3Error(S3Error):
    """S3Error carrying only an error code."""

    def __init__(self, code: str):
        Exception.__init__(self, code)
        self._fake_code = code

    code = property(lambda self: self._fake_code)

    def __str__(self):
        return self._fake_code


class FakeResponse:
    def __init__(self, data: bytes):
        self._data = data
        self.closed = False
        self.released = False

    def read(self) -> bytes:
        return self._data

    def close(self):
        self.closed = True

    def release_conn(self):
        self.released = True


@pytest.fixture
def client():
    """MagicMock client backed by a dict of objects."""
    objects = {}
    mock = MagicMock()
    mock.objects = objects
    mock.bucket_exists.return_value = False

    def put_object(bucket_name, object_name, data, length, content_type):
        objects[object_name] = data.read()
        assert len(objects[object_name]) == length

    def get_object(bucket_name, object_name):
        if object_name not in objects:
            raise FakeS3Error("NoSuchKey")
        return FakeResponse(objects[object_name])

    def stat_object(bucket_name, object_name):
        if object_name not in objects:
            raise FakeS3Error("NoSuchKey")
        return MagicMock(size=len(objects[object_name]))

    def remove_object(bucket_name, object_name):
        objects.pop(object_name, None)

    mock.put_object.side_effect = put_object
    mock.get_object.side_effect = get_object
    mock.stat_object.side_effect = stat_object
    mock.remove_object.side_effect = remove_object
    return mock


@pytest.fixture
def provider(client) -> S3StorageProvider:
    return S3StorageProvider(bucket="drive", client=client)


class TestS3Provider:
    async def test_round_trip(self, provider, client):
        stored = await provider.upload("photo.jpg", b"\xff\xd8jpeg", "image/jpeg", "user-a")
        assert stored.size == 6
        assert await provider.download(stored.key) == b"\xff\xd8jpeg"
        assert client.put_object.call_args.kwargs["content_type"] == "image/jpeg"

    async def test_bucket_created_once(self, provider, client):
        await provider.upload("a.txt", b"a", "text/plain", "user-a")
        await provider.upload("b.txt", b"b", "text/plain", "user-a")
        client.make_bucket.assert_called_once_with(bucket_name="drive")

    async def test_zero_byte_file(self, provider):
        stored = await provider.upload("empty", b"", "", "user-a")
        assert stored.size == 0
        assert await provider.download(stored.key) == b""

    async def test_response_released_after_read(self, provider, client):
        stored = await provider.upload("a.txt", b"a", "text/plain", "user-a")
        response = FakeResponse(b"a")
        client.get_object.side_effect = None
        client.get_object.return_value = response
        await provider.download(stored.key)
        assert response.closed and response.released

    async def test_download_missing_raises_not_found(self, provider):
        with pytest.raises(NotFoundError):
            await provider.download("user-a/missing")

    async def test_delete_missing_is_success(self, provider, client):
        client.remove_object.side_effect = FakeS3Error("NoSuchKey")
        await provider.delete("user-a/missing")

    async def test_exists(self, provider):
        stored = await provider.upload("a.txt", b"a", "text/plain", "user-a")
        assert await provider.exists(stored.key) is True
        assert await provider.exists("user-a/missing") is False

    async def test_exists_never_raises(self, provider, client):
        client.stat_object.side_effect = ConnectionError("connection refused")
        assert await provider.exists("any") is False

    async def test_other_failures_are_backend_errors(self, provider, client):
        client.get_object.side_effect = FakeS3Error("AccessDenied")
        with pytest.raises(StorageBackendError):
            await provider.download("user-a/key")

        client.put_object.side_effect = ConnectionError("connection refused")
        with pytest.raises(StorageBackendError):
            await provider.upload("a.txt", b"a", "text/plain", "user-a")

        client.remove_object.side_effect = ConnectionError("connection refused")
        with pytest.raises(StorageBackendError):
            await provider.delete("user-a/key")
