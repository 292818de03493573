"""Account Schemas — profile rename, notification settings, account deletion."""

from pydantic import BaseModel


class ProfileUpdate(BaseModel):
    display_name: str = ""


class SettingsPayload(BaseModel):
    email_notifications: bool


class AccountDeletionResponse(BaseModel):
    message: str
    tracks_deleted: int


class MessageResponse(BaseModel):
    message: str
