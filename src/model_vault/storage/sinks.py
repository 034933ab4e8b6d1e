"""Byte sinks for writing a transform to a file or a binary stream."""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import BinaryIO


class StreamSink:
    """IByteSink over an already-open binary stream (e.g. stdout).

    The stream is flushed on close and on abort, but never closed: it
    belongs to the caller.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    async def write(self, data: bytes) -> None:
        await asyncio.to_thread(self.stream.write, data)

    async def close(self) -> None:
        await asyncio.to_thread(self.stream.flush)

    async def abort(self, exc: BaseException) -> None:
        await asyncio.to_thread(self.stream.flush)


class AtomicFileSink:
    """IByteSink writing to a temporary file renamed into place on close.

    An aborted run removes the temporary file, so a failed transform never
    leaves a truncated output that looks complete.
    """

    def __init__(self, target: str | Path):
        self.target = Path(target)
        self._handle: BinaryIO | None = None
        self._tmp_path: Path | None = None

    async def _ensure_open(self) -> BinaryIO:
        if self._handle is None:
            fd, tmp_name = await asyncio.to_thread(
                tempfile.mkstemp,
                dir=self.target.parent,
                prefix=f".{self.target.name}.",
                suffix=".part",
            )
            self._tmp_path = Path(tmp_name)
            self._handle = os.fdopen(fd, "wb")
        return self._handle

    async def write(self, data: bytes) -> None:
        handle = await self._ensure_open()
        await asyncio.to_thread(handle.write, data)

    async def close(self) -> None:
        handle = await self._ensure_open()
        await asyncio.to_thread(handle.close)
        await asyncio.to_thread(os.replace, self._tmp_path, self.target)

    async def abort(self, exc: BaseException) -> None:
        if self._handle is None:
            return
        await asyncio.to_thread(self._handle.close)
        self._tmp_path.unlink(missing_ok=True)
