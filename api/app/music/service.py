"""Catalog write path: coordinates media uploads with record persistence.

Failure profile (intentional, no compensating actions):

- create: uploads run in slot order and stop at the first failure. Files
  uploaded earlier in the same call, or before a failed insert, stay in
  storage unreferenced.
- update: a replaced file's previous blob is not deleted.
- delete: blob removal errors are logged and ignored; the row is deleted
  regardless.
"""

from typing import Any, List, Mapping, Optional

from fastapi import UploadFile

from app.errors import InvalidFieldError, StorageIOError
from app.logging_config import logger
from app.models.music import MEDIA_SLOTS, Music
from app.storage.base import StorageBackend
from app.timeouts import with_timeout

# Fields a caller may patch; locators are only changed through uploads.
EDITABLE_FIELDS = ("title", "artist", "lyrics")


class MusicService:
    """Media orchestrator for catalog records.

    Every public operation runs under one ``timeout`` budget shared by all of
    its storage and repository calls.
    """

    def __init__(self, repo, storage: StorageBackend, timeout: float = 5.0):
        self.repo = repo
        self.storage = storage
        self.timeout = timeout

    async def _upload_slots(self, files: Mapping[str, Optional[UploadFile]]) -> dict[str, str]:
        """Upload present files sequentially; the first failure propagates."""
        locators = {}
        for slot in MEDIA_SLOTS:
            file = files.get(slot)
            if file is None:
                continue
            locators[f"{slot}_url"] = await self.storage.upload(file)
        return locators

    async def create(
        self,
        music: Music,
        audio: Optional[UploadFile] = None,
        video: Optional[UploadFile] = None,
        image: Optional[UploadFile] = None,
    ) -> Music:
        """Upload the given files, then persist ``music`` with their locators."""
        files = {"audio": audio, "video": video, "image": image}
        return await with_timeout("create music", self._create(music, files), self.timeout)

    async def _create(self, music: Music, files: Mapping[str, Optional[UploadFile]]) -> Music:
        for field, locator in (await self._upload_slots(files)).items():
            setattr(music, field, locator)

        created = await self.repo.create(music)
        logger.info(
            "Music created",
            music_id=created.id,
            title=created.title,
            media=sorted(created.locators()),
        )
        return created

    async def get_by_id(self, music_id: int) -> Music:
        return await with_timeout("get music", self.repo.get_by_id(music_id), self.timeout)

    async def get_all(self) -> List[Music]:
        return await with_timeout("list music", self.repo.get_all(), self.timeout)

    async def update(
        self,
        music_id: int,
        changes: Mapping[str, Any],
        audio: Optional[UploadFile] = None,
        video: Optional[UploadFile] = None,
        image: Optional[UploadFile] = None,
        updated_by: Optional[str] = None,
    ) -> Music:
        """Patch a record.

        Only keys present in ``changes`` are written; replaced files get new
        locators. The stored row is re-read and returned.

        Raises:
            NotFoundError: If the record does not exist
            StorageIOError: If an upload fails (nothing is written)
        """
        files = {"audio": audio, "video": video, "image": image}
        return await with_timeout(
            "update music",
            self._update(music_id, changes, files, updated_by),
            self.timeout,
        )

    async def _update(
        self,
        music_id: int,
        changes: Mapping[str, Any],
        files: Mapping[str, Optional[UploadFile]],
        updated_by: Optional[str],
    ) -> Music:
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidFieldError(f"Fields not editable: {', '.join(sorted(unknown))}")

        existing = await self.repo.get_by_id(music_id)

        values = dict(changes)
        values.update(await self._upload_slots(files))
        if values and updated_by:
            values["updated_by"] = updated_by

        if values:
            await self.repo.update(existing.id, values)

        updated = await self.repo.get_by_id(existing.id)
        logger.info("Music updated", music_id=music_id, fields=sorted(values))
        return updated

    async def delete(self, music_id: int) -> None:
        """Delete a record and, best effort, its stored media.

        Raises:
            NotFoundError: If the record does not exist
        """
        await with_timeout("delete music", self._delete(music_id), self.timeout)

    async def _delete(self, music_id: int) -> None:
        music = await self.repo.get_by_id(music_id)

        for slot, locator in music.locators().items():
            try:
                await self.storage.delete(locator)
            except StorageIOError as e:
                logger.warning(
                    "Ignoring media delete failure",
                    music_id=music_id,
                    slot=slot,
                    locator=locator,
                    error=str(e),
                )

        await self.repo.delete(music_id)
        logger.info("Music deleted", music_id=music_id)
