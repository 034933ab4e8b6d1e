"""
Test fixtures package for streaming transform tests.

Provides in-memory byte sources and sinks, including ones that fail on
demand, plus a lazily generated source for memory tests.
"""

from collections.abc import Iterator

CUBE_OBJ = b"v 1.0 2.0 3.0\nf 1 2 3\n"


class MemorySource:
    """IByteSource over a bytes object, served in chunks of ``max_chunk``."""

    def __init__(self, data: bytes, max_chunk: int | None = None):
        self.data = data
        self.max_chunk = max_chunk
        self.pos = 0
        self.reads = 0
        self.closed = False
        self.close_calls = 0

    async def read(self, size: int) -> bytes:
        if self.closed:
            raise ValueError("read from closed source")
        self.reads += 1
        if self.max_chunk is not None:
            size = min(size, self.max_chunk)
        chunk = self.data[self.pos : self.pos + size]
        self.pos += len(chunk)
        return chunk

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class FailingSource(MemorySource):
    """Serves ``data`` then raises OSError on the next read."""

    def __init__(self, data: bytes = b"", max_chunk: int | None = None):
        super().__init__(data, max_chunk)

    async def read(self, size: int) -> bytes:
        if self.pos >= len(self.data):
            self.reads += 1
            raise OSError(5, "Input/output error")
        return await super().read(size)


class GeneratedSource:
    """Produces ``line_count`` vertex lines on demand without storing them."""

    def __init__(self, line_count: int):
        self._lines = self._generate(line_count)
        self._pending = b""
        self.closed = False

    @staticmethod
    def _generate(line_count: int) -> Iterator[bytes]:
        for i in range(line_count):
            if i % 4 == 3:
                yield f"f {i - 2} {i - 1} {i}\n".encode()
            else:
                yield f"v {i}.5 {-i}.25 {i * 2}.125\n".encode()

    async def read(self, size: int) -> bytes:
        parts = [self._pending]
        total = len(self._pending)
        while total < size:
            line = next(self._lines, None)
            if line is None:
                break
            parts.append(line)
            total += len(line)
        data = b"".join(parts)
        self._pending = data[size:]
        return data[:size]

    async def close(self) -> None:
        self.closed = True


class RecordingSink:
    """IByteSink collecting every write."""

    def __init__(self):
        self.chunks: list[bytes] = []
        self.closed = False
        self.aborted: BaseException | None = None
        self.close_calls = 0
        self.abort_calls = 0

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)

    @property
    def text(self) -> str:
        return self.data.decode("utf-8")

    async def write(self, data: bytes) -> None:
        self.chunks.append(data)

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True

    async def abort(self, exc: BaseException) -> None:
        self.abort_calls += 1
        self.aborted = exc


class FailingSink(RecordingSink):
    """Accepts ``accept`` writes, then raises BrokenPipeError."""

    def __init__(self, accept: int = 0):
        super().__init__()
        self.accept = accept

    async def write(self, data: bytes) -> None:
        if len(self.chunks) >= self.accept:
            raise BrokenPipeError(32, "Broken pipe")
        await super().write(data)


class CountingSink:
    """IByteSink keeping only totals, for large streams."""

    def __init__(self):
        self.bytes_written = 0
        self.writes = 0
        self.closed = False

    async def write(self, data: bytes) -> None:
        self.writes += 1
        self.bytes_written += len(data)

    async def close(self) -> None:
        self.closed = True

    async def abort(self, exc: BaseException) -> None:
        pass
