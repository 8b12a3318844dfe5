"""Local filesystem storage backend."""

import os
import shutil
from typing import BinaryIO

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from app.errors import StorageIOError
from app.logging_config import logger
from app.storage.base import StorageBackend, generate_filename


class LocalStorage(StorageBackend):
    """Stores media files in a directory served under ``base_url``.

    Locators have the form ``{base_url}/{generated-filename}``.
    """

    name = "local"

    def __init__(self, upload_dir: str, base_url: str):
        self.upload_dir = os.path.abspath(upload_dir)
        self.base_url = base_url.rstrip("/")
        try:
            os.makedirs(self.upload_dir, mode=0o755, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create upload directory", upload_dir=self.upload_dir, error=str(e))
            raise StorageIOError(f"Cannot create upload directory: {e}") from e

        logger.info("Local storage initialized", upload_dir=self.upload_dir, base_url=self.base_url)

    def _write(self, src: BinaryIO, path: str) -> int:
        dst = open(path, "xb")
        try:
            with dst:
                shutil.copyfileobj(src, dst)
                return dst.tell()
        except OSError:
            # Drop the partial file
            os.remove(path)
            raise

    async def upload(self, file: UploadFile) -> str:
        filename = generate_filename(file.filename)
        path = os.path.join(self.upload_dir, filename)

        try:
            size_bytes = await self._stream_in_thread(self._write, file, path)
        except OSError as e:
            self._record("upload", "error")
            logger.error(
                "Failed to store uploaded file",
                original_filename=file.filename,
                path=path,
                error=str(e),
            )
            raise StorageIOError(f"Failed to store {file.filename!r}") from e

        self._record("upload", "success")
        locator = f"{self.base_url}/{filename}"
        logger.info(
            "Stored uploaded file",
            original_filename=file.filename,
            locator=locator,
            size_bytes=size_bytes,
        )
        return locator

    def resolve(self, locator: str) -> str:
        """Map a locator back to its path inside the upload directory.

        Raises:
            StorageIOError: If the locator is not one of ours
        """
        prefix = f"{self.base_url}/"
        if not locator.startswith(prefix):
            raise StorageIOError(f"Locator does not belong to local storage: {locator!r}")

        filename = locator[len(prefix):]
        if not filename or filename in (".", "..") or "/" in filename or "\\" in filename:
            raise StorageIOError(f"Locator does not name a stored file: {locator!r}")

        return os.path.join(self.upload_dir, filename)

    async def delete(self, locator: str) -> None:
        try:
            path = self.resolve(locator)
            await run_in_threadpool(os.remove, path)
        except StorageIOError:
            self._record("delete", "error")
            logger.warning("Cannot resolve locator for deletion", locator=locator)
            raise
        except OSError as e:
            self._record("delete", "error")
            logger.warning("Failed to delete stored file", locator=locator, error=str(e))
            raise StorageIOError(f"Failed to delete {locator!r}") from e

        self._record("delete", "success")
        logger.info("Deleted stored file", locator=locator)
