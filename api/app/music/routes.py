"""Music catalog routes."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, ConfigDict

from app.auth.middleware import AuthUser, get_current_user
from app.config import settings
from app.dependencies import get_music_service
from app.logging_config import logger
from app.models.music import Music
from app.music.service import MusicService

router = APIRouter()


# Response models
class MusicResponse(BaseModel):
    """Catalog record response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    artist: str
    lyrics: Optional[str] = None
    audio_url: Optional[str] = None
    video_url: Optional[str] = None
    image_url: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MusicListResponse(BaseModel):
    musics: List[MusicResponse]
    total: int


class MessageResponse(BaseModel):
    message: str


def _present(file: Optional[UploadFile], field: str) -> Optional[UploadFile]:
    """Treat an empty file part as absent and enforce the per-file size limit."""
    if file is None or not file.filename:
        return None
    if file.size is not None and file.size > settings.max_upload_size_bytes:
        logger.warning(
            "Upload rejected, file too large",
            field=field,
            original_filename=file.filename,
            size_bytes=file.size,
        )
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"{field} exceeds maximum size of {settings.max_upload_size_bytes} bytes",
        )
    return file


@router.post("", response_model=MusicResponse, status_code=status.HTTP_201_CREATED)
async def create_music(
    title: str = Form(..., min_length=1, max_length=255),
    artist: str = Form(..., min_length=1, max_length=255),
    lyrics: Optional[str] = Form(None),
    audio_file: Optional[UploadFile] = File(None, description="Audio file (e.g. MP3)"),
    video_file: Optional[UploadFile] = File(None, description="Video file (e.g. MP4)"),
    image_file: Optional[UploadFile] = File(None, description="Cover image"),
    current_user: AuthUser = Depends(get_current_user),
    music_service: MusicService = Depends(get_music_service),
):
    """Create a catalog record, uploading any attached media first.

    Raises:
        StorageIOError: 502 if a media upload fails (no record is created)
    """
    music = Music(
        title=title,
        artist=artist,
        lyrics=lyrics,
        created_by=current_user.email,
        updated_by=current_user.email,
    )
    return await music_service.create(
        music,
        audio=_present(audio_file, "audio_file"),
        video=_present(video_file, "video_file"),
        image=_present(image_file, "image_file"),
    )


@router.get("", response_model=MusicListResponse)
async def list_music(
    current_user: AuthUser = Depends(get_current_user),
    music_service: MusicService = Depends(get_music_service),
):
    """List all catalog records."""
    musics = await music_service.get_all()
    return MusicListResponse(
        musics=[MusicResponse.model_validate(m) for m in musics],
        total=len(musics),
    )


@router.get("/{music_id}", response_model=MusicResponse)
async def get_music(
    music_id: int,
    current_user: AuthUser = Depends(get_current_user),
    music_service: MusicService = Depends(get_music_service),
):
    """Get a catalog record by ID."""
    return await music_service.get_by_id(music_id)


@router.put("/{music_id}", response_model=MusicResponse)
async def update_music(
    music_id: int,
    title: Optional[str] = Form(None, min_length=1, max_length=255),
    artist: Optional[str] = Form(None, min_length=1, max_length=255),
    lyrics: Optional[str] = Form(None),
    audio_file: Optional[UploadFile] = File(None),
    video_file: Optional[UploadFile] = File(None),
    image_file: Optional[UploadFile] = File(None),
    current_user: AuthUser = Depends(get_current_user),
    music_service: MusicService = Depends(get_music_service),
):
    """Patch a catalog record.

    Fields and files that are not sent keep their current values. A new file
    replaces the record's locator for that slot.
    """
    changes = {
        key: value
        for key, value in (("title", title), ("artist", artist), ("lyrics", lyrics))
        if value is not None
    }
    return await music_service.update(
        music_id,
        changes,
        audio=_present(audio_file, "audio_file"),
        video=_present(video_file, "video_file"),
        image=_present(image_file, "image_file"),
        updated_by=current_user.email,
    )


@router.delete("/{music_id}", response_model=MessageResponse)
async def delete_music(
    music_id: int,
    current_user: AuthUser = Depends(get_current_user),
    music_service: MusicService = Depends(get_music_service),
):
    """Delete a catalog record and, best effort, its stored media."""
    await music_service.delete(music_id)
    return MessageResponse(message="Music deleted successfully")
