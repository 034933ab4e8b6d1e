"""Streaming transform pipeline.

Orchestrates: read line → classify → transform or pass through → write.

Each output line is written to the sink as soon as it is produced; the sink's
``write`` suspends while the consumer is slow, which throttles reading. A
session moves IDLE → STREAMING → COMPLETED | FAILED and closes its source and
sink exactly once, whichever terminal state it reaches.
"""

import asyncio
import time
from enum import Enum

from model_vault.config import StreamingConfig
from model_vault.exceptions import (
    ModelVaultError,
    SinkWriteError,
    SourceReadError,
)
from model_vault.infrastructure.observability import get_processing_logger
from model_vault.transformation.classifier import (
    ILineClassifier,
    PrefixLineClassifier,
    SourceLine,
    build_classifier,
)
from model_vault.transformation.engine import (
    DEFAULT_PRECISION,
    TransformEngine,
    check_precision,
)
from model_vault.transformation.ports import IByteSink, IByteSource
from model_vault.transformation.reader import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_LINE_LENGTH,
    AsyncLineReader,
)
from model_vault.transformation.vectors import TransformSpec

logger = get_processing_logger("stream-pipeline")


class StreamState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


class StreamSession:
    """State for one transform request: a source, a sink and a spec.

    Not reusable; a second ``run`` raises RuntimeError.
    """

    def __init__(
        self,
        source: IByteSource,
        sink: IByteSink,
        spec: TransformSpec,
        label: str | None = None,
    ):
        self.source = source
        self.sink = sink
        self.spec = spec
        self.label = label
        self.state = StreamState.IDLE
        self.error: BaseException | None = None

        self.lines_read = 0
        self.lines_transformed = 0
        self.bytes_written = 0

        self._source_closed = False
        self._sink_closed = False

    def _transition(self, new_state: StreamState) -> None:
        allowed = {
            StreamState.IDLE: {StreamState.STREAMING},
            StreamState.STREAMING: {StreamState.COMPLETED, StreamState.FAILED},
        }
        if new_state not in allowed.get(self.state, set()):
            raise RuntimeError(
                f"Invalid stream transition {self.state.value} -> {new_state.value}"
            )
        self.state = new_state

    async def release_source(self) -> None:
        if self._source_closed:
            return
        self._source_closed = True
        try:
            await self.source.close()
        except OSError as e:
            logger.warning("source_close_failed", file=self.label, error=str(e))

    async def finish(self) -> None:
        """Finalize the sink, then mark success."""
        await self.release_source()
        if not self._sink_closed:
            self._sink_closed = True
            try:
                await self.sink.close()
            except OSError as e:
                raise SinkWriteError(f"Failed to finalize output: {e}") from e
        self._transition(StreamState.COMPLETED)

    async def fail(self, exc: BaseException) -> None:
        """Mark failure and abort the sink without finalizing it."""
        if self.state is StreamState.FAILED:
            return
        self._transition(StreamState.FAILED)
        self.error = exc
        await self.release_source()
        if not self._sink_closed:
            self._sink_closed = True
            try:
                await self.sink.abort(exc)
            except OSError as e:
                logger.debug("sink_abort_failed", file=self.label, error=str(e))


class StreamingTransformPipeline:
    """Transforms coordinate records of a model file while streaming it.

    Holds no per-request state; one instance can serve concurrent requests,
    each with its own StreamSession.
    """

    def __init__(
        self,
        classifier: ILineClassifier | None = None,
        precision: int = DEFAULT_PRECISION,
        strict: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
        encoding: str = "utf-8",
    ):
        """Initialize pipeline.

        Args:
            classifier: Line classifier (default: ``v`` prefix classifier)
            precision: Decimal places of transformed coordinates
            strict: If True, non-numeric coordinates raise MalformedRecord
            chunk_size: Bytes requested from the source per read
            max_line_length: Longest line accepted before LineTooLong
            encoding: Text encoding of the model files
        """
        self.classifier = classifier or PrefixLineClassifier()
        self.precision = check_precision(precision)
        self.strict = strict
        self.chunk_size = chunk_size
        self.max_line_length = max_line_length
        self.encoding = encoding

    @classmethod
    def from_config(cls, config: StreamingConfig) -> "StreamingTransformPipeline":
        return cls(
            classifier=build_classifier(config.classifier),
            precision=config.precision,
            strict=config.strict_records,
            chunk_size=config.chunk_size,
            max_line_length=config.max_line_length,
            encoding=config.encoding,
        )

    def render_line(
        self, line: SourceLine, engine: TransformEngine, line_number: int
    ) -> str:
        if not line.is_coordinate:
            return line.text
        fields = engine.apply(line.fields, line_number=line_number)
        return f"{line.tag} {' '.join(fields)}"

    async def run(
        self,
        source: IByteSource,
        sink: IByteSink,
        spec: TransformSpec,
        label: str | None = None,
    ) -> StreamSession:
        """Stream ``source`` through the transform into ``sink``.

        Args:
            source: Opened byte source; released when the run ends
            sink: Output sink; closed on success, aborted on failure
            spec: Scale and translate vectors
            label: Name used in log events (usually the file name)

        Returns:
            The completed StreamSession (counters, final state)

        Raises:
            SourceReadError: The source failed mid-stream
            SinkWriteError: The sink rejected a write
            MalformedRecord: Strict mode and a coordinate was not numeric
        """
        session = StreamSession(source, sink, spec, label=label)
        return await self.run_session(session)

    async def run_session(self, session: StreamSession) -> StreamSession:
        session._transition(StreamState.STREAMING)
        engine = TransformEngine(
            session.spec, precision=self.precision, strict=self.strict
        )
        reader = AsyncLineReader(
            session.source,
            chunk_size=self.chunk_size,
            max_line_length=self.max_line_length,
            encoding=self.encoding,
        )
        start_time = time.monotonic()

        try:
            async for text in reader:
                session.lines_read += 1
                classified = self.classifier.classify(text)
                rendered = self.render_line(classified, engine, session.lines_read)
                if classified.is_coordinate:
                    session.lines_transformed += 1

                data = (rendered + "\n").encode(self.encoding, "surrogateescape")
                try:
                    await session.sink.write(data)
                except OSError as e:
                    raise SinkWriteError(f"Output stream closed: {e}") from e
                session.bytes_written += len(data)

            await session.finish()

        except SinkWriteError as e:
            logger.info(
                "sink_write_failed",
                file=session.label,
                lines_read=session.lines_read,
                error=str(e),
            )
            await session.fail(e)
            raise
        except SourceReadError as e:
            logger.error(
                "source_read_failed",
                file=session.label,
                lines_read=session.lines_read,
                bytes_written=session.bytes_written,
                error=str(e),
            )
            await session.fail(e)
            raise
        except ModelVaultError as e:
            logger.warning(
                "stream_aborted",
                file=session.label,
                lines_read=session.lines_read,
                error=str(e),
            )
            await session.fail(e)
            raise
        except asyncio.CancelledError as e:
            logger.info(
                "stream_cancelled", file=session.label, lines_read=session.lines_read
            )
            await session.fail(e)
            raise
        except Exception as e:
            logger.exception(
                "stream_failed", file=session.label, lines_read=session.lines_read
            )
            await session.fail(e)
            raise

        logger.info(
            "stream_completed",
            file=session.label,
            lines_read=session.lines_read,
            lines_transformed=session.lines_transformed,
            bytes_written=session.bytes_written,
            duration_seconds=round(time.monotonic() - start_time, 3),
        )
        return session
