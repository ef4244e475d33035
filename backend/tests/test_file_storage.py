"""Tests for the local filesystem blob store."""
from pathlib import Path

import pytest

from app.errors import BadInput, StorageReadError, StorageWriteError
from app.services.file_storage import FileStorageService


class TestAddress:
    def test_address_is_owner_scoped(self, blob_store: FileStorageService):
        address = blob_store.address_for("alice", "a.txt")
        assert Path(address) == blob_store.base_path / "alice" / "a.txt"

    @pytest.mark.parametrize("name", ["", "   ", ".", "..", "../x", "dir/a.txt", "dir\\a.txt", "a\x00b"])
    def test_rejects_unsafe_names(self, blob_store: FileStorageService, name: str):
        with pytest.raises(BadInput):
            blob_store.address_for("alice", name)

    def test_rejects_name_over_255_bytes(self, blob_store: FileStorageService):
        with pytest.raises(BadInput):
            blob_store.address_for("alice", "n" * 252 + ".txt")
        with pytest.raises(BadInput):
            blob_store.address_for("alice", "\u00e9" * 128)

    def test_rejects_unsafe_owner(self, blob_store: FileStorageService):
        with pytest.raises(BadInput):
            blob_store.address_for("../bob", "a.txt")


class TestUnsupportedStorage:
    def test_unknown_storage_type(self, tmp_path):
        with pytest.raises(ValueError):
            FileStorageService(base_path=tmp_path, storage_type="azure_blob")


@pytest.mark.asyncio
class TestWriteRead:
    async def test_write_then_read(self, blob_store: FileStorageService):
        address = await blob_store.write("alice", "a.txt", b"hello")
        assert await blob_store.read(address) == b"hello"
        assert await blob_store.exists(address)

    async def test_overwrite_replaces_content(self, blob_store: FileStorageService):
        await blob_store.write("alice", "a.txt", b"hello")
        address = await blob_store.write("alice", "a.txt", b"hello world")
        assert await blob_store.read(address) == b"hello world"

    async def test_no_temp_files_left_behind(self, blob_store: FileStorageService):
        await blob_store.write("alice", "a.txt", b"one")
        await blob_store.write("alice", "a.txt", b"two")
        assert [p.name for p in (blob_store.base_path / "alice").iterdir()] == ["a.txt"]

    async def test_long_name_within_limit(self, blob_store: FileStorageService):
        name = "n" * 230 + ".txt"
        address = await blob_store.write("alice", name, b"hello")
        assert Path(address).name == name
        assert await blob_store.read(address) == b"hello"
        assert [p.name for p in (blob_store.base_path / "alice").iterdir()] == [name]

    async def test_name_of_exactly_255_bytes(self, blob_store: FileStorageService):
        name = "n" * 251 + ".txt"
        address = await blob_store.write("alice", name, b"x")
        assert await blob_store.read(address) == b"x"

    async def test_zero_length(self, blob_store: FileStorageService):
        address = await blob_store.write("alice", "empty.bin", b"")
        assert await blob_store.read(address) == b""

    async def test_read_missing_raises(self, blob_store: FileStorageService):
        with pytest.raises(StorageReadError):
            await blob_store.read(blob_store.address_for("alice", "nope.txt"))

    async def test_write_failure_raises_storage_write_error(self, blob_store: FileStorageService):
        # A regular file where the owner directory should be
        (blob_store.base_path / "alice").write_bytes(b"in the way")
        with pytest.raises(StorageWriteError):
            await blob_store.write("alice", "a.txt", b"hello")


@pytest.mark.asyncio
class TestDelete:
    async def test_delete_existing(self, blob_store: FileStorageService):
        address = await blob_store.write("alice", "a.txt", b"hello")
        assert await blob_store.delete(address) is True
        assert not await blob_store.exists(address)

    async def test_delete_missing_returns_false(self, blob_store: FileStorageService):
        assert await blob_store.delete(blob_store.address_for("alice", "gone.txt")) is False
