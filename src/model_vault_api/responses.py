"""ASGI response that drives the streaming transform pipeline.

The HTTP response itself is the pipeline's sink: every transformed line is
passed to ASGI ``send`` and awaited, so a slow client throttles reading.

``http.response.start`` is deferred until the first line is ready. A failure
before that point still becomes a normal error response (500 for an unreadable
source); after it, the only way to signal failure is to abort the connection,
which is what re-raising from an ASGI app does.
"""

import asyncio
from collections.abc import Mapping

from starlette.background import BackgroundTask
from starlette.responses import Response
from starlette.types import Message, Receive, Scope, Send

from model_vault.exceptions import ModelVaultError, SinkWriteError, SourceReadError
from model_vault.infrastructure.observability import get_api_logger
from model_vault.transformation import StreamingTransformPipeline, TransformSpec
from model_vault.transformation.ports import IByteSource
from model_vault_api.errors import error_response

logger = get_api_logger("transform-response")


class AsgiResponseSink:
    """IByteSink writing HTTP body chunks through ASGI ``send``."""

    def __init__(self, send: Send, status_code: int, raw_headers: list):
        self._send = send
        self.status_code = status_code
        self.raw_headers = raw_headers
        self.started = False

    async def _start(self) -> None:
        if self.started:
            return
        self.started = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers,
            }
        )

    async def write(self, data: bytes) -> None:
        await self._start()
        await self._send({"type": "http.response.body", "body": data, "more_body": True})

    async def close(self) -> None:
        await self._start()
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})

    async def abort(self, exc: BaseException) -> None:
        # Leave the body unterminated; the response decides how to end it.
        pass


class TransformStreamResponse(Response):
    """Streams ``source`` through ``pipeline`` into the HTTP response."""

    def __init__(
        self,
        pipeline: StreamingTransformPipeline,
        source: IByteSource,
        spec: TransformSpec,
        label: str | None = None,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        media_type: str | None = None,
        background: BackgroundTask | None = None,
    ):
        self.pipeline = pipeline
        self.source = source
        self.spec = spec
        self.label = label
        self.status_code = status_code
        self.media_type = self.media_type if media_type is None else media_type
        self.background = background
        # no body attribute: length is unknown, so no Content-Length header
        self.init_headers(headers)

    async def _listen_for_disconnect(self, receive: Receive) -> None:
        while True:
            message: Message = await receive()
            if message["type"] == "http.disconnect":
                return

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        sink = AsgiResponseSink(send, self.status_code, self.raw_headers)
        stream_task = asyncio.create_task(
            self.pipeline.run(self.source, sink, self.spec, label=self.label)
        )
        disconnect_task = asyncio.create_task(self._listen_for_disconnect(receive))

        try:
            await asyncio.wait(
                {stream_task, disconnect_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (stream_task, disconnect_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(stream_task, disconnect_task, return_exceptions=True)
            # the pipeline releases the source itself unless it never started
            await self.source.close()

        if stream_task.cancelled():
            logger.info("client_disconnected", file=self.label)
            return

        exc = stream_task.exception()
        if exc is None:
            if self.background is not None:
                await self.background()
            return

        if isinstance(exc, SinkWriteError):
            logger.info("client_disconnected", file=self.label, error=str(exc))
            return

        if not sink.started:
            if not isinstance(exc, ModelVaultError):
                logger.error("transform_failed", file=self.label, error=repr(exc))
                exc = SourceReadError("Error reading the file")
            await error_response(exc)(scope, receive, send)
            return

        logger.error(
            "transform_aborted_mid_stream",
            file=self.label,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise exc
