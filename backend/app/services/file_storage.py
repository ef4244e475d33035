"""File storage abstraction. Blobs live on the local filesystem.

Each owner gets a directory under FILE_STORAGE_PATH and each file name one
slot inside it: ``<base>/<owner_id>/<name>``. Writing a name again replaces
the bytes in that slot.
"""
import logging
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from app.config import settings
from app.errors import BadInput, StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

_FORBIDDEN_PARTS = {"", ".", ".."}
MAX_NAME_BYTES = 255


def _check_part(value: str, label: str) -> str:
    if value is None or value.strip() in _FORBIDDEN_PARTS:
        raise BadInput(f"Invalid {label}: {value!r}", {label: value})
    if "/" in value or "\\" in value or "\x00" in value:
        raise BadInput(f"{label} must not contain path separators", {label: value})
    if len(value.encode("utf-8")) > MAX_NAME_BYTES:
        raise BadInput(f"{label} longer than {MAX_NAME_BYTES} bytes", {label: value})
    return value


class FileStorageService:
    """Handles blob read/write/delete on local disk."""

    def __init__(self, base_path: str | Path | None = None, storage_type: str | None = None):
        self.storage_type = storage_type or settings.FILE_STORAGE_TYPE
        if self.storage_type != "local":
            raise ValueError(f"Unknown storage type: {self.storage_type}")
        self.base_path = Path(base_path or settings.FILE_STORAGE_PATH)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def address_for(self, owner_id: str, name: str) -> str:
        """Stable blob address for (owner_id, name). Raises BadInput on unsafe parts."""
        owner = _check_part(owner_id, "owner_id")
        file_name = _check_part(name, "name")
        return str(self.base_path / owner / file_name)

    async def write(self, owner_id: str, name: str, file_bytes: bytes) -> str:
        """Write bytes to the slot for (owner_id, name), replacing prior content.

        The bytes go to a temp file first and are renamed into place, so the
        slot holds either the old or the new content, never a partial write.
        Returns the blob address.
        """
        address = self.address_for(owner_id, name)
        target = Path(address)
        tmp_path = target.with_name(f".{uuid.uuid4().hex}.tmp")
        try:
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(file_bytes)
            await aiofiles.os.replace(tmp_path, target)
        except OSError as e:
            await self._discard(tmp_path)
            raise StorageWriteError(
                f"Failed to write blob for {name!r}: {e}",
                {"name": name, "address": address},
            ) from e
        return address

    async def read(self, address: str) -> bytes:
        """Read blob bytes. Raises StorageReadError when the address holds nothing."""
        try:
            async with aiofiles.open(address, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise StorageReadError(f"No blob at {address}", {"address": address}) from e
        except OSError as e:
            raise StorageReadError(f"Failed to read blob at {address}: {e}", {"address": address}) from e

    async def delete(self, address: str) -> bool:
        """Delete the blob. Returns False when there was nothing to delete."""
        try:
            await aiofiles.os.remove(address)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageWriteError(f"Failed to delete blob at {address}: {e}", {"address": address}) from e
        return True

    async def exists(self, address: str) -> bool:
        return await aiofiles.os.path.isfile(address)

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temp file {path}: {e}")


file_storage = FileStorageService()
