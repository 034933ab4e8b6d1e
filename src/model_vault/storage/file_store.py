"""Local directory file store.

Flat directory of model files addressed by sanitized names. Every public
method validates the name before touching the file system.
"""

import asyncio
import os
import re
import tempfile
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from model_vault.exceptions import (
    FileAlreadyExists,
    FileNotFound,
    InvalidFileName,
    SourceReadError,
    UploadTooLarge,
)
from model_vault.infrastructure.observability import get_storage_logger
from model_vault.storage.sources import LocalFileSource

_ALLOWED_NAME = re.compile(r"[A-Za-z0-9_.\-]+")

logger = get_storage_logger("local-file-store")


def sanitize_file_name(raw: str) -> str:
    """Return ``raw`` if it is a safe flat file name.

    Names with directory components are rejected rather than stripped, so a
    traversal attempt never resolves to a different stored file.

    Raises:
        InvalidFileName: empty, contains ``/`` or ``\\``, starts with ``.``,
            or uses characters outside ``[A-Za-z0-9_.-]``
    """
    if not raw:
        raise InvalidFileName("Invalid file name: name is empty.")
    if "/" in raw or "\\" in raw:
        raise InvalidFileName(
            f"Invalid file name: {raw!r} must not contain directory components."
        )
    # dot-files are hidden from listings and reserved for in-flight uploads
    if raw.startswith("."):
        raise InvalidFileName(f"Invalid file name: {raw!r} must not start with '.'.")
    if not _ALLOWED_NAME.fullmatch(raw):
        raise InvalidFileName(f"Invalid file name: {raw!r}.")
    return raw


@dataclass(frozen=True)
class StoredFile:
    """Metadata of one stored file."""

    name: str
    size: int
    last_modified: datetime

    @classmethod
    def from_path(cls, path: Path) -> "StoredFile":
        stat = path.stat()
        return cls(
            name=path.name,
            size=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "lastModified": self.last_modified.isoformat(),
        }


class LocalFileStore:
    """Stores model files in a single directory."""

    def __init__(self, root: str | Path, create: bool = True):
        self.root = Path(root)
        if create:
            self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        return self.root / sanitize_file_name(name)

    def is_available(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.R_OK | os.X_OK)

    def resolve(self, name: str) -> Path:
        """Path of an existing stored file.

        Raises:
            InvalidFileName: name fails sanitization
            FileNotFound: no regular file with that name
        """
        path = self._path(name)
        if not path.is_file():
            raise FileNotFound("File not found")
        return path

    async def list_files(self) -> list[StoredFile]:
        def _scan() -> list[StoredFile]:
            files = []
            for entry in sorted(self.root.iterdir()):
                # dot-files include in-flight uploads
                if entry.name.startswith("."):
                    continue
                if entry.is_file() and _ALLOWED_NAME.fullmatch(entry.name):
                    files.append(StoredFile.from_path(entry))
            return files

        return await asyncio.to_thread(_scan)

    async def open_source(self, name: str) -> LocalFileSource:
        """Open a stored file for streaming.

        Raises:
            FileNotFound: file vanished between lookup and open
            SourceReadError: file exists but cannot be opened
        """
        path = self.resolve(name)
        try:
            return await LocalFileSource.open(path)
        except FileNotFoundError:
            raise FileNotFound("File not found") from None
        except OSError as e:
            logger.error("file_open_failed", name=name, error=str(e))
            raise SourceReadError("Error reading the file") from e

    async def save(
        self,
        name: str,
        chunks: AsyncIterator[bytes],
        max_bytes: int | None = None,
    ) -> StoredFile:
        """Write an upload to the store, replacing any file with that name.

        Chunks go to a temporary file in the store directory which is renamed
        into place only after the last chunk, so readers never see a partial
        upload.

        Raises:
            InvalidFileName: name fails sanitization
            UploadTooLarge: more than ``max_bytes`` were received
        """
        target = self._path(name)
        fd, tmp_name = await asyncio.to_thread(
            tempfile.mkstemp, dir=self.root, prefix=".upload-", suffix=".part"
        )
        tmp_path = Path(tmp_name)
        written = 0
        try:
            with os.fdopen(fd, "wb") as fh:
                async for chunk in chunks:
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise UploadTooLarge(
                            f"Upload exceeds the {max_bytes} byte limit"
                        )
                    await asyncio.to_thread(fh.write, chunk)
            await asyncio.to_thread(os.replace, tmp_path, target)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info("file_uploaded", name=target.name, size=written)
        return await asyncio.to_thread(StoredFile.from_path, target)

    async def rename(self, name: str, new_name: str) -> StoredFile:
        """Rename a stored file.

        Raises:
            FileNotFound: source does not exist
            FileAlreadyExists: target name is taken
        """
        source = self.resolve(name)
        target = self._path(new_name)
        if source == target:
            return await asyncio.to_thread(StoredFile.from_path, source)
        if target.exists():
            raise FileAlreadyExists(f"File {new_name!r} already exists")

        await asyncio.to_thread(source.rename, target)
        logger.info("file_renamed", name=name, new_name=new_name)
        return await asyncio.to_thread(StoredFile.from_path, target)

    async def delete(self, name: str) -> None:
        path = self.resolve(name)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            raise FileNotFound("File not found") from None
        logger.info("file_deleted", name=name)
