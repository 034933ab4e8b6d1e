from .file_store import LocalFileStore, StoredFile, sanitize_file_name
from .sinks import AtomicFileSink, StreamSink
from .sources import LocalFileSource

__all__ = [
    "AtomicFileSink",
    "LocalFileSource",
    "LocalFileStore",
    "StoredFile",
    "StreamSink",
    "sanitize_file_name",
]
