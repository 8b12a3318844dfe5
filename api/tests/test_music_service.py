"""Tests for the catalog media orchestration."""

import asyncio
import os

import pytest
from starlette.datastructures import UploadFile

from app.errors import InvalidFieldError, NotFoundError, OperationTimeoutError, StorageIOError
from app.models.music import Music
from app.music.service import MusicService
from conftest import RecordingStorage, SlowReader, make_upload


def new_music(**fields):
    fields.setdefault("title", "Song")
    fields.setdefault("artist", "Artist")
    return Music(**fields)


class TestCreate:
    """Test create with and without media."""

    @pytest.mark.asyncio
    async def test_create_with_audio(self, music_service, local_storage):
        data = os.urandom(1024)

        created = await music_service.create(
            new_music(title="T", artist="A"),
            audio=make_upload("song.mp3", data),
        )

        assert created.audio_url
        assert created.video_url is None
        assert created.image_url is None
        with open(local_storage.resolve(created.audio_url), "rb") as stored:
            assert stored.read() == data

        fetched = await music_service.get_by_id(created.id)
        assert fetched.title == "T"
        assert fetched.artist == "A"
        assert fetched.audio_url == created.audio_url

    @pytest.mark.asyncio
    async def test_create_without_media(self, music_service):
        created = await music_service.create(new_music(lyrics="la la"))

        assert created.locators() == {}
        assert created.lyrics == "la la"

    @pytest.mark.asyncio
    async def test_uploads_run_in_slot_order(self, music_repo):
        storage = RecordingStorage()
        service = MusicService(music_repo, storage)

        created = await service.create(
            new_music(),
            image=make_upload("cover.jpg"),
            audio=make_upload("song.mp3"),
            video=make_upload("clip.mp4"),
        )

        assert storage.uploaded == [created.audio_url, created.video_url, created.image_url]

    @pytest.mark.asyncio
    async def test_upload_failure_aborts_without_cleanup(self, music_repo):
        storage = RecordingStorage(fail_uploads_for={"clip.mp4"})
        service = MusicService(music_repo, storage)

        with pytest.raises(StorageIOError):
            await service.create(
                new_music(),
                audio=make_upload("song.mp3"),
                video=make_upload("clip.mp4"),
                image=make_upload("cover.jpg"),
            )

        # audio stays stored, image is never attempted, nothing is persisted
        assert len(storage.uploaded) == 1
        assert storage.uploaded[0].endswith("song.mp3")
        assert storage.deleted == []
        assert await music_repo.get_all() == []

    @pytest.mark.asyncio
    async def test_persistence_failure_leaves_uploads(self, music_repo):
        storage = RecordingStorage()
        service = MusicService(music_repo, storage)
        music_repo.fail_on_create = True

        with pytest.raises(RuntimeError):
            await service.create(new_music(), audio=make_upload("song.mp3"))

        assert len(storage.uploaded) == 1
        assert storage.deleted == []

    @pytest.mark.asyncio
    async def test_slow_storage_times_out(self, music_repo):
        service = MusicService(music_repo, RecordingStorage(upload_delay=1.0), timeout=0.05)

        with pytest.raises(OperationTimeoutError):
            await service.create(new_music(), audio=make_upload("song.mp3"))

    @pytest.mark.asyncio
    async def test_timeout_aborts_in_flight_upload(self, music_repo, local_storage):
        service = MusicService(music_repo, local_storage, timeout=0.1)
        source = SlowReader(chunks=10, delay=0.05)

        with pytest.raises(OperationTimeoutError):
            await service.create(new_music(), audio=UploadFile(source, filename="song.mp3"))
        await asyncio.sleep(0.3)

        assert source.remaining > 0
        assert os.listdir(local_storage.upload_dir) == []
        assert await music_repo.get_all() == []


class TestReads:
    @pytest.mark.asyncio
    async def test_get_all_in_insertion_order(self, music_service):
        first = await music_service.create(new_music(title="One"))
        second = await music_service.create(new_music(title="Two"))

        assert [m.id for m in await music_service.get_all()] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_get_missing(self, music_service):
        with pytest.raises(NotFoundError):
            await music_service.get_by_id(999)


class TestUpdate:
    """Test partial updates."""

    @pytest.mark.asyncio
    async def test_title_only(self, music_service):
        created = await music_service.create(
            new_music(title="Old", artist="Artist", lyrics="words"),
            audio=make_upload("song.mp3"),
            image=make_upload("cover.png"),
        )
        before = created.locators()

        updated = await music_service.update(created.id, {"title": "New"})

        assert updated.title == "New"
        assert updated.artist == "Artist"
        assert updated.lyrics == "words"
        assert updated.locators() == before

    @pytest.mark.asyncio
    async def test_new_file_replaces_locator_and_keeps_old_blob(self, music_service, local_storage):
        created = await music_service.create(new_music(), audio=make_upload("song.mp3", b"v1"))
        old_locator = created.audio_url

        updated = await music_service.update(
            created.id, {}, audio=make_upload("song.mp3", b"v2"), updated_by="editor@example.com"
        )

        assert updated.audio_url != old_locator
        assert updated.updated_by == "editor@example.com"
        assert os.path.exists(local_storage.resolve(old_locator))
        with open(local_storage.resolve(updated.audio_url), "rb") as stored:
            assert stored.read() == b"v2"

    @pytest.mark.asyncio
    async def test_empty_update_changes_nothing(self, music_service):
        created = await music_service.create(new_music(title="Same", updated_by="owner@example.com"))

        updated = await music_service.update(created.id, {}, updated_by="editor@example.com")

        assert updated.title == "Same"
        assert updated.updated_by == "owner@example.com"

    @pytest.mark.asyncio
    async def test_update_missing_uploads_nothing(self, music_repo):
        storage = RecordingStorage()
        service = MusicService(music_repo, storage)

        with pytest.raises(NotFoundError):
            await service.update(999, {"title": "x"}, audio=make_upload("song.mp3"))
        assert storage.uploaded == []

    @pytest.mark.asyncio
    async def test_locators_are_not_editable(self, music_service):
        created = await music_service.create(new_music())

        with pytest.raises(InvalidFieldError) as exc_info:
            await music_service.update(created.id, {"audio_url": "http://evil.example.com/x"})

        assert exc_info.value.status_code == 422
        assert (await music_service.get_by_id(created.id)).audio_url is None


class TestDelete:
    """Test record deletion with best-effort media cleanup."""

    @pytest.mark.asyncio
    async def test_delete_removes_record_and_blobs(self, music_service, local_storage):
        created = await music_service.create(new_music(), audio=make_upload("song.mp3"))
        path = local_storage.resolve(created.audio_url)

        await music_service.delete(created.id)

        assert not os.path.exists(path)
        with pytest.raises(NotFoundError):
            await music_service.get_by_id(created.id)

    @pytest.mark.asyncio
    async def test_missing_blob_does_not_block_delete(self, music_service, local_storage):
        created = await music_service.create(new_music(), audio=make_upload("song.mp3"))
        os.remove(local_storage.resolve(created.audio_url))

        await music_service.delete(created.id)

        with pytest.raises(NotFoundError):
            await music_service.get_by_id(created.id)

    @pytest.mark.asyncio
    async def test_storage_errors_are_ignored(self, music_repo):
        storage = RecordingStorage(fail_deletes=True)
        service = MusicService(music_repo, storage)
        created = await service.create(new_music(), audio=make_upload("song.mp3"), video=make_upload("clip.mp4"))

        await service.delete(created.id)

        assert await music_repo.get_all() == []

    @pytest.mark.asyncio
    async def test_delete_missing(self, music_service):
        with pytest.raises(NotFoundError):
            await music_service.delete(999)
