"""Storage backend contract shared by the local and object store variants."""

import asyncio
import os
import re
import threading
import uuid
from typing import Any, BinaryIO, Callable, Optional, TypeVar
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from app.logging_config import logger
from app.metrics import STORAGE_OPERATIONS

T = TypeVar("T")

_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,16}$")


def generate_filename(original_filename: Optional[str]) -> str:
    """Build a collision-resistant object name.

    Format: ``{UTC YYYYmmddHHMMSS}_{uuid4}{ext}`` where ``ext`` is the original
    extension when it is a plain alphanumeric suffix.
    """
    ext = os.path.splitext(original_filename or "")[1]
    if not _EXTENSION_RE.match(ext):
        ext = ""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{timestamp}_{uuid.uuid4()}{ext}"


class CancellableReader:
    """Read-only view of an upload stream that fails once ``cancelled`` is set.

    Worker threads keep running after the awaiting coroutine is cancelled;
    checking the event on every read stops them at the next chunk.
    """

    def __init__(self, raw: BinaryIO, cancelled: threading.Event):
        self._raw = raw
        self.cancelled = cancelled

    def read(self, size: int = -1) -> bytes:
        if self.cancelled.is_set():
            raise OSError("upload cancelled")
        return self._raw.read(size)


class StorageBackend(ABC):
    """Blob upload/delete returning a retrievable locator."""

    name: str = "base"

    @abstractmethod
    async def upload(self, file: UploadFile) -> str:
        """Stream ``file`` to the backend under a generated name.

        Returns:
            Locator usable for retrieval and later deletion

        Raises:
            StorageIOError: On any read, write or network failure
        """

    @abstractmethod
    async def delete(self, locator: str) -> None:
        """Remove the blob identified by ``locator``.

        Raises:
            StorageIOError: If the locator cannot be resolved or removal fails
        """

    def _record(self, operation: str, outcome: str) -> None:
        STORAGE_OPERATIONS.labels(backend=self.name, operation=operation, outcome=outcome).inc()

    async def _stream_in_thread(
        self,
        func: Callable[..., T],
        file: UploadFile,
        *args: Any,
    ) -> T:
        """Run ``func(reader, *args)`` in the threadpool over a cancellable reader.

        When the calling task is cancelled (request budget exceeded, client
        gone) the reader starts failing so the thread stops streaming.
        """
        cancelled = threading.Event()
        reader = CancellableReader(file.file, cancelled)
        try:
            return await run_in_threadpool(func, reader, *args)
        except asyncio.CancelledError:
            cancelled.set()
            self._record("upload", "cancelled")
            logger.warning("Upload cancelled", backend=self.name, original_filename=file.filename)
            raise
