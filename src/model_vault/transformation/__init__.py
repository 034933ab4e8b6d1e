"""
Streaming affine transformation of OBJ-style model files.

Coordinate records are scaled and translated line by line while the file is
streamed, so arbitrarily large models are served without being loaded.
"""

from .classifier import (
    PrefixLineClassifier,
    RecordKind,
    SourceLine,
    TaggedLineClassifier,
    build_classifier,
)
from .engine import TransformEngine, format_coordinate, parse_coordinate
from .pipeline import StreamingTransformPipeline, StreamSession, StreamState
from .reader import AsyncLineReader
from .vectors import (
    TransformSpec,
    Vector3,
    parse_vector_param,
    validate_vector,
)

__all__ = [
    "AsyncLineReader",
    "PrefixLineClassifier",
    "RecordKind",
    "SourceLine",
    "StreamSession",
    "StreamState",
    "StreamingTransformPipeline",
    "TaggedLineClassifier",
    "TransformEngine",
    "TransformSpec",
    "Vector3",
    "build_classifier",
    "format_coordinate",
    "parse_coordinate",
    "parse_vector_param",
    "validate_vector",
]
