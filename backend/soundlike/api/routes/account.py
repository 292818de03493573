"""Account Routes — display name, notification settings, and account deletion.

Invariants:
    - Profile update requires a verified e-mail
    - Account deletion removes every row the user owns or that points at their tracks,
      then their blobs; blob failures do not fail the request
"""

import logging

from fastapi import APIRouter, Depends

from soundlike.api.dependencies import (
    get_current_identity, get_deletion_orchestrator, get_profile_service,
    require_verified,
)
from soundlike.core.repository_protocols import VerifiedIdentity
from soundlike.schemas.account import (
    AccountDeletionResponse, MessageResponse, ProfileUpdate, SettingsPayload,
)
from soundlike.services.deletion import DeletionOrchestrator
from soundlike.services.profile import ProfileService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["account"])


@router.post("/profile", response_model=MessageResponse)
async def update_profile(
    body: ProfileUpdate,
    user: VerifiedIdentity = Depends(require_verified("update profile")),
    service: ProfileService = Depends(get_profile_service),
):
    await service.update_display_name(user.uid, body.display_name)
    return MessageResponse(message="Profile updated successfully!")


@router.get("/settings", response_model=SettingsPayload)
async def get_settings(
    user: VerifiedIdentity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    enabled = await service.get_notifications_enabled(user.uid)
    return SettingsPayload(email_notifications=enabled)


@router.post("/settings", response_model=MessageResponse)
async def update_settings(
    body: SettingsPayload,
    user: VerifiedIdentity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    await service.set_notifications_enabled(user.uid, body.email_notifications)
    return MessageResponse(message="Settings updated.")


@router.delete("/account", response_model=AccountDeletionResponse)
async def delete_account(
    user: VerifiedIdentity = Depends(get_current_identity),
    orchestrator: DeletionOrchestrator = Depends(get_deletion_orchestrator),
):
    report = await orchestrator.delete_account(user.uid)
    if report.blobs_failed:
        logger.warning(
            f"{len(report.blobs_failed)} blob(s) left after account deletion",
            extra={"event": "cleanup_warning", "user_uid": user.uid},
        )
    return AccountDeletionResponse(
        message="Account data deleted successfully.",
        tracks_deleted=report.tracks_deleted,
    )
