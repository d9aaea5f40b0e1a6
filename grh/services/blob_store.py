"""Blob stores for uploaded files.

Two stores share one interface:
- DatabaseBlobStore keeps bytes in the ``stored_files`` table (mission
  reports). Handles are the row UUIDs.
- LocalBlobStore keeps bytes under ``settings.upload_dir`` (CV files and
  training materials). Handles are paths relative to the root.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from grh.core.errors import DependencyFailure, NotFoundError, ValidationError
from grh.models import StoredFile
from grh.repositories.interfaces import StoredFileRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredBlob:
    """Downloaded blob content and its metadata."""

    data: bytes
    content_type: str
    filename: str


class BlobStore(Protocol):
    async def put(
        self,
        data: bytes,
        *,
        content_type: str,
        filename: str,
        metadata: dict[str, Any] | None = None,
    ) -> str: ...

    async def get(self, handle: str) -> StoredBlob: ...

    async def delete(self, handle: str) -> None: ...


# =============================================================================
# Database store
# =============================================================================


class DatabaseBlobStore:
    """Large-object store backed by the stored_files table."""

    def __init__(self, files: StoredFileRepository) -> None:
        self.files = files

    @staticmethod
    def _parse(handle: str) -> uuid.UUID:
        try:
            return uuid.UUID(handle)
        except ValueError as e:
            raise NotFoundError("File", handle) from e

    async def put(
        self,
        data: bytes,
        *,
        content_type: str,
        filename: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        stored = await self.files.add(
            StoredFile(
                filename=filename,
                content_type=content_type,
                size=len(data),
                file_metadata=metadata,
                data=data,
            )
        )
        return str(stored.id)

    async def get(self, handle: str) -> StoredBlob:
        stored = await self.files.get(self._parse(handle))
        if stored is None:
            raise NotFoundError("File", handle)
        return StoredBlob(
            data=stored.data,
            content_type=stored.content_type,
            filename=stored.filename,
        )

    async def delete(self, handle: str) -> None:
        stored = await self.files.get(self._parse(handle))
        if stored is None:
            raise NotFoundError("File", handle)
        await self.files.delete(stored)


# =============================================================================
# Local-path store
# =============================================================================

_CONTENT_TYPE_SUFFIX = ".content-type"


class LocalBlobStore:
    """Filesystem store rooted at one directory.

    Each blob is written as ``<uuid>-<filename>`` with a sidecar file holding
    its content type. Handles never resolve outside the root.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _path(self, handle: str) -> Path:
        path = (self.root / handle).resolve()
        if not path.is_relative_to(self.root) or path == self.root:
            raise ValidationError(
                message="Invalid file handle",
                details=[{"field": "handle", "message": "PATH_TRAVERSAL"}],
            )
        return path

    @staticmethod
    def _safe_name(filename: str) -> str:
        name = Path(filename.replace("\\", "/")).name
        return name or "file"

    async def put(
        self,
        data: bytes,
        *,
        content_type: str,
        filename: str,
        metadata: dict[str, Any] | None = None,  # noqa: ARG002
    ) -> str:
        handle = f"{uuid.uuid4()}-{self._safe_name(filename)}"
        path = self._path(handle)

        def write() -> None:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            path.with_name(path.name + _CONTENT_TYPE_SUFFIX).write_text(content_type)

        try:
            await asyncio.to_thread(write)
        except OSError as e:
            logger.error("Failed to write blob %s: %s", handle, e)
            raise DependencyFailure("Failed to store file") from e
        return handle

    async def get(self, handle: str) -> StoredBlob:
        path = self._path(handle)

        def read() -> tuple[bytes, str]:
            data = path.read_bytes()
            sidecar = path.with_name(path.name + _CONTENT_TYPE_SUFFIX)
            content_type = (
                sidecar.read_text() if sidecar.exists() else "application/octet-stream"
            )
            return data, content_type

        try:
            data, content_type = await asyncio.to_thread(read)
        except FileNotFoundError as e:
            raise NotFoundError("File", handle) from e
        except OSError as e:
            logger.error("Failed to read blob %s: %s", handle, e)
            raise DependencyFailure("Failed to read file") from e
        # Strip the uuid prefix added by put().
        filename = handle.split("-", 5)[-1] if handle.count("-") >= 5 else handle
        return StoredBlob(data=data, content_type=content_type, filename=filename)

    async def delete(self, handle: str) -> None:
        path = self._path(handle)

        def remove() -> None:
            path.unlink()
            path.with_name(path.name + _CONTENT_TYPE_SUFFIX).unlink(missing_ok=True)

        try:
            await asyncio.to_thread(remove)
        except FileNotFoundError as e:
            raise NotFoundError("File", handle) from e
        except OSError as e:
            logger.error("Failed to delete blob %s: %s", handle, e)
            raise DependencyFailure("Failed to delete file") from e
