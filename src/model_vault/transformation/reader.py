"""Bounded-buffer async line reader.

Reads fixed-size chunks from an IByteSource and yields decoded lines one at a
time. At most one chunk plus one partial line is held in memory, so memory
use depends on line length, never on file size.
"""

import re
from collections.abc import AsyncIterator

from model_vault.exceptions import LineTooLong, SourceReadError
from model_vault.transformation.ports import IByteSource

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_LINE_LENGTH = 1024 * 1024

# \r\n, \n and a lone \r all end a line
_LINE_BREAK = re.compile(rb"\r\n|\n|\r")


class AsyncLineReader:
    """Async iterator over the lines of a byte source.

    Lines are yielded without their terminator. An unterminated final line is
    still yielded; a trailing terminator does not produce an empty extra line.
    Bytes are decoded with ``surrogateescape`` so that encoding them back the
    same way reproduces the input exactly.
    """

    def __init__(
        self,
        source: IByteSource,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
        encoding: str = "utf-8",
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.source = source
        self.chunk_size = chunk_size
        self.max_line_length = max_line_length
        self.encoding = encoding

    def __aiter__(self) -> AsyncIterator[str]:
        return self._lines()

    async def _read_chunk(self) -> bytes:
        try:
            return await self.source.read(self.chunk_size)
        except OSError as e:
            raise SourceReadError(f"Error reading the file: {e}") from e

    def _decode(self, raw: bytes) -> str:
        if len(raw) > self.max_line_length:
            raise LineTooLong(
                f"Line exceeds {self.max_line_length} bytes; refusing to buffer it"
            )
        return raw.decode(self.encoding, "surrogateescape")

    async def _lines(self) -> AsyncIterator[str]:
        buffer = b""

        while True:
            chunk = await self._read_chunk()
            if not chunk:
                break
            buffer += chunk

            start = 0
            for match in _LINE_BREAK.finditer(buffer):
                if match.group() == b"\r" and match.end() == len(buffer):
                    # may be the first half of \r\n split across chunks
                    break
                yield self._decode(buffer[start : match.start()])
                start = match.end()

            buffer = buffer[start:]
            if len(buffer) > self.max_line_length:
                raise LineTooLong(
                    f"Line exceeds {self.max_line_length} bytes; refusing to buffer it"
                )

        if buffer.endswith(b"\r"):
            yield self._decode(buffer[:-1])
        elif buffer:
            yield self._decode(buffer)
