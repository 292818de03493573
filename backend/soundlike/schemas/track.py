"""Track Schemas — listing rows, upload result, like toggle result."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TrackResponse(BaseModel):
    """Public track row with read-time like aggregates."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    title: str
    artist: str
    lyrics: str
    uploader_uid: str
    uploader_name: str
    created_at: datetime
    likes_count: int
    is_liked: bool


class UploadResponse(BaseModel):
    message: str
    track_id: int
    filename: str


class LikeToggleResponse(BaseModel):
    likes_count: int
    is_liked: bool
