"""Byte sources backed by local files.

Blocking file calls run in worker threads so the event loop keeps serving
other requests while a large model is being read.
"""

import asyncio
from pathlib import Path
from typing import BinaryIO


class LocalFileSource:
    """IByteSource over a file opened in binary mode."""

    def __init__(self, handle: BinaryIO, path: Path | None = None):
        self._handle = handle
        self.path = path

    @classmethod
    async def open(cls, path: str | Path) -> "LocalFileSource":
        path = Path(path)
        handle = await asyncio.to_thread(open, path, "rb")
        return cls(handle, path)

    @property
    def closed(self) -> bool:
        return self._handle.closed

    async def read(self, size: int) -> bytes:
        return await asyncio.to_thread(self._handle.read, size)

    async def close(self) -> None:
        if not self._handle.closed:
            await asyncio.to_thread(self._handle.close)
