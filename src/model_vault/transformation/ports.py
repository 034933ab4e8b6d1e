"""Port/Protocol definitions for the streaming transform.

Defines abstract interfaces for:
- Byte sources: where model bytes are read from (local file, test doubles)
- Byte sinks: where transformed bytes go (HTTP response, file, stdout)

All ports use Protocol-based structural typing so the pipeline never depends
on a concrete transport.
"""

from typing import Protocol


class IByteSource(Protocol):
    """Readable byte stream owned by exactly one stream session."""

    async def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes.

        Returns:
            Bytes read; empty bytes at end of input

        Raises:
            OSError: If the underlying resource fails
        """
        ...

    async def close(self) -> None:
        """Release the underlying resource. Safe to call more than once."""
        ...


class IByteSink(Protocol):
    """Writable byte stream with backpressure.

    ``write`` must not return until the sink can accept more data, so a slow
    consumer suspends the producer instead of growing a buffer.
    """

    async def write(self, data: bytes) -> None:
        """Write one chunk.

        Raises:
            OSError: If the consumer went away
        """
        ...

    async def close(self) -> None:
        """Finalize the output after all lines were written successfully."""
        ...

    async def abort(self, exc: BaseException) -> None:
        """Tear down the output after a failure; must not mark it complete."""
        ...
