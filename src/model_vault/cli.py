#!/usr/bin/env python3
"""
Transform a model file offline with the same streaming pipeline the API uses.

    model-vault-transform cube.obj --scale '[2,2,2]' -o cube_big.obj
"""

import argparse
import asyncio
import sys

from model_vault.exceptions import FileNotFound, ModelVaultError, SourceReadError
from model_vault.infrastructure.observability import setup_logging
from model_vault.storage import AtomicFileSink, LocalFileSource, StreamSink
from model_vault.transformation import (
    StreamingTransformPipeline,
    StreamSession,
    TransformSpec,
    build_classifier,
    parse_vector_param,
)
from model_vault.transformation.engine import check_precision
from model_vault.transformation.vectors import IDENTITY_SCALE, ZERO_TRANSLATE


def _precision(value: str) -> int:
    try:
        return check_precision(int(value))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scale and translate the vertices of an OBJ-style model file"
    )
    parser.add_argument("source", help="Model file to read")
    parser.add_argument(
        "-o", "--output", default=None, help="Output file (default: stdout)"
    )
    parser.add_argument("--scale", default=None, help="JSON array, e.g. '[2,2,2]'")
    parser.add_argument(
        "--translate", default=None, help="JSON array, e.g. '[0,0,1.5]'"
    )
    parser.add_argument(
        "--precision", type=_precision, default=6, help="Decimal places, 0 to 17"
    )
    parser.add_argument(
        "--classifier", choices=["prefix", "tagged"], default="prefix"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on non-numeric coordinates instead of writing NaN",
    )
    parser.add_argument("--log-level", default="WARNING")
    return parser


async def transform_file(
    source_path: str,
    output_path: str | None,
    spec: TransformSpec,
    pipeline: StreamingTransformPipeline,
) -> StreamSession:
    sink = AtomicFileSink(output_path) if output_path else StreamSink(sys.stdout.buffer)
    try:
        source = await LocalFileSource.open(source_path)
    except FileNotFoundError:
        raise FileNotFound(f"File not found: {source_path}") from None
    except OSError as e:
        raise SourceReadError(f"Cannot open {source_path}: {e}") from e
    return await pipeline.run(source, sink, spec, label=source_path)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(
        level=args.log_level, json_logs=False, include_timestamp=False, stream=sys.stderr
    )

    try:
        spec = TransformSpec(
            scale=parse_vector_param(args.scale, "scale", IDENTITY_SCALE),
            translate=parse_vector_param(args.translate, "translate", ZERO_TRANSLATE),
        )
        pipeline = StreamingTransformPipeline(
            classifier=build_classifier(args.classifier),
            precision=args.precision,
            strict=args.strict,
        )
        session = asyncio.run(transform_file(args.source, args.output, spec, pipeline))
    except ModelVaultError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1

    if args.output:
        print(
            f"Wrote {session.lines_read} lines "
            f"({session.lines_transformed} transformed) to {args.output}",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
