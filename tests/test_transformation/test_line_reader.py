"""
Tests for AsyncLineReader: line splitting across chunk boundaries,
terminator handling and bounded buffering.
"""

import pytest

from model_vault.exceptions import LineTooLong, SourceReadError
from model_vault.transformation.reader import AsyncLineReader
from tests.fixtures import FailingSource, MemorySource


async def collect(source, **kwargs) -> list[str]:
    return [line async for line in AsyncLineReader(source, **kwargs)]


class TestLineSplitting:
    @pytest.mark.asyncio
    async def test_lf_lines(self):
        assert await collect(MemorySource(b"a\nb\nc\n")) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_unterminated_last_line(self):
        assert await collect(MemorySource(b"a\nb")) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_empty_source(self):
        assert await collect(MemorySource(b"")) == []

    @pytest.mark.asyncio
    async def test_blank_lines_kept(self):
        assert await collect(MemorySource(b"a\n\n\nb\n")) == ["a", "", "", "b"]

    @pytest.mark.asyncio
    async def test_single_newline(self):
        assert await collect(MemorySource(b"\n")) == [""]

    @pytest.mark.asyncio
    async def test_crlf_and_lone_cr(self):
        data = b"a\r\nb\rc\nd"
        assert await collect(MemorySource(data)) == ["a", "b", "c", "d"]

    @pytest.mark.asyncio
    async def test_trailing_cr(self):
        assert await collect(MemorySource(b"a\r")) == ["a"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_chunk", [1, 2, 3, 5, 7])
    async def test_chunk_boundaries_do_not_change_lines(self, max_chunk):
        data = b"v 1 2 3\r\nf 1 2 3\rvn 0 0 1\n\nlast"
        expected = ["v 1 2 3", "f 1 2 3", "vn 0 0 1", "", "last"]
        assert await collect(MemorySource(data, max_chunk=max_chunk)) == expected

    @pytest.mark.asyncio
    async def test_crlf_split_across_reads(self):
        # the \r arrives alone at the end of the first read
        source = MemorySource(b"abc\r\ndef\n", max_chunk=4)
        assert await collect(source) == ["abc", "def"]

    @pytest.mark.asyncio
    async def test_invalid_utf8_survives_round_trip(self):
        raw = b"o caf\xe9\n"
        lines = await collect(MemorySource(raw))
        assert lines[0].encode("utf-8", "surrogateescape") == b"o caf\xe9"

    @pytest.mark.asyncio
    async def test_multibyte_character_split_across_reads(self):
        raw = "o cube-é\n".encode()
        assert await collect(MemorySource(raw, max_chunk=1)) == ["o cube-é"]


class TestBoundedBuffer:
    @pytest.mark.asyncio
    async def test_line_too_long(self):
        source = MemorySource(b"x" * 100 + b"\n")
        with pytest.raises(LineTooLong):
            await collect(source, chunk_size=16, max_line_length=32)

    @pytest.mark.asyncio
    async def test_line_too_long_is_source_error(self):
        source = MemorySource(b"x" * 100)
        with pytest.raises(SourceReadError):
            await collect(source, chunk_size=8, max_line_length=32)

    @pytest.mark.asyncio
    async def test_line_at_limit_accepted(self):
        source = MemorySource(b"y" * 32 + b"\nz\n")
        lines = await collect(source, chunk_size=8, max_line_length=32)
        assert lines == ["y" * 32, "z"]

    @pytest.mark.asyncio
    async def test_reads_in_requested_chunk_size(self):
        source = MemorySource(b"a\n" * 50)
        await collect(source, chunk_size=10)
        # 100 bytes / 10 per read, plus the final empty read
        assert source.reads == 11

    def test_rejects_non_positive_chunk_size(self):
        with pytest.raises(ValueError):
            AsyncLineReader(MemorySource(b""), chunk_size=0)


class TestReadErrors:
    @pytest.mark.asyncio
    async def test_os_error_becomes_source_read_error(self):
        source = FailingSource(b"v 1 2 3\n")
        reader = AsyncLineReader(source)
        seen = []
        with pytest.raises(SourceReadError, match="Error reading the file"):
            async for line in reader:
                seen.append(line)
        assert seen == ["v 1 2 3"]

    @pytest.mark.asyncio
    async def test_error_on_first_read(self):
        with pytest.raises(SourceReadError):
            await collect(FailingSource())
