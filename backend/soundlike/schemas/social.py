"""Social Schemas — comments and follow state."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CommentCreate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    track_id: int
    user_uid: str
    user_name: str
    content: str
    created_at: datetime


class FollowStatusResponse(BaseModel):
    is_following: bool


class FollowToggleResponse(FollowStatusResponse):
    message: str
