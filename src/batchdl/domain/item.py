"""Item contract consumed by the downloader and a file-backed implementation."""

import asyncio
import typing as t
from pathlib import Path

import aiofiles
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


@t.runtime_checkable
class WriteTarget(t.Protocol):
    """Destination that accepts chunks at arbitrary offsets."""

    async def write_at(self, data: bytes, offset: int) -> int: ...


@t.runtime_checkable
class RemoteFile(t.Protocol):
    """Remote object metadata needed to fetch it."""

    @property
    def size(self) -> int: ...

    @property
    def location(self) -> str: ...

    @property
    def dc(self) -> int: ...


@t.runtime_checkable
class DownloadItem(t.Protocol):
    """One unit of work handed out by an item source.

    The downloader only reads these attributes; it never mutates an item.
    """

    @property
    def name(self) -> str: ...

    @property
    def file(self) -> RemoteFile: ...

    @property
    def takeout(self) -> bool: ...

    @property
    def target(self) -> WriteTarget: ...


class FileTarget:
    """Write target backed by a file on disk.

    The file is created (or truncated) on the first write. Concurrent parts
    are serialised through a lock because each write seeks a shared file.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = asyncio.Lock()
        self._created = False

    async def write_at(self, data: bytes, offset: int) -> int:
        async with self._lock:
            if not self._created:
                async with aiofiles.open(self.path, "wb"):
                    pass
                self._created = True

            async with aiofiles.open(self.path, "r+b") as file_handle:
                await file_handle.seek(offset)
                written = await file_handle.write(data)
        return written


class RemoteFileInfo(BaseModel):
    """Remote file metadata: where it lives and how big it is."""

    model_config = ConfigDict(frozen=True)

    location: str = Field(description="URL or other locator passed to the engine")
    size: int = Field(ge=0, description="Size of the remote object in bytes")
    dc: int = Field(default=0, ge=0, description="Endpoint (data-center) id")


class FileItem(BaseModel):
    """Downloadable item written to a local path.

    Example:
        ```python
        item = FileItem(
            name="video.mp4",
            file=RemoteFileInfo(location="https://dc2.example/video.mp4", size=60 << 20, dc=2),
            destination=Path("./downloads/video.mp4"),
        )
        ```
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name and tracking key")
    file: RemoteFileInfo
    destination: Path = Field(description="Local path the content is written to")
    takeout: bool = Field(
        default=False, description="Fetch through the endpoint's takeout session"
    )

    _target: FileTarget | None = PrivateAttr(default=None)

    @property
    def target(self) -> FileTarget:
        if self._target is None:
            self._target = FileTarget(self.destination)
        return self._target
