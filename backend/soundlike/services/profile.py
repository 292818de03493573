"""Profile & Settings Service — display-name rename fan-out and notification preference.

Invariants:
    - A display name is never stored on live tracks of two different uploaders
    - Rename order: uniqueness check -> identity provider update -> ONE local transaction
      rewriting uploader_name on all the user's tracks and user_name on all their comments
    - Missing settings row means notifications are enabled

Design Decisions:
    - Provider update and local update are sequential, not atomic (the provider is not
      transactional). If the local step fails the provider already has the new name;
      the error is surfaced and the next rename repairs the denormalized copies
    - Uniqueness re-checked inside the local transaction to close the check/update race
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from soundlike.core.enforce_social import normalize_display_name
from soundlike.core.errors import DisplayNameTakenError
from soundlike.core.repository_protocols import IdentityProvider
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.models import Comment, Track, UserSetting
from soundlike.services.track_queries import display_name_owner

logger = logging.getLogger(__name__)


class ProfileService:

    def __init__(self, db: DatabaseSessionManager, identity: IdentityProvider):
        self.db = db
        self.identity = identity

    async def update_display_name(self, uid: str, requested: str) -> str:
        name = normalize_display_name(requested)
        async with self.db.session() as db:
            if await display_name_owner(db, name, uid):
                raise DisplayNameTakenError(name)

        await self.identity.update_display_name(uid, name)

        try:
            async with self.db.transaction() as db:
                if await display_name_owner(db, name, uid):
                    raise DisplayNameTakenError(name)
                await db.execute(
                    update(Track).where(Track.uploader_uid == uid)
                    .values(uploader_name=name),
                )
                await db.execute(
                    update(Comment).where(Comment.user_uid == uid)
                    .values(user_name=name),
                )
        except Exception:
            logger.error(
                "Display name updated at identity provider but not locally",
                extra={"user_uid": uid},
            )
            raise
        logger.info("Display name updated", extra={"user_uid": uid})
        return name

    async def get_notifications_enabled(self, uid: str) -> bool:
        async with self.db.session() as db:
            result = await db.execute(
                select(UserSetting.email_notifications)
                .where(UserSetting.user_uid == uid),
            )
            enabled = result.scalar_one_or_none()
        return True if enabled is None else bool(enabled)

    async def set_notifications_enabled(self, uid: str, enabled: bool) -> None:
        now = datetime.now(timezone.utc)
        stmt = sqlite_insert(UserSetting).values(
            user_uid=uid, email_notifications=enabled, updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserSetting.user_uid],
            set_={"email_notifications": enabled, "updated_at": now},
        )
        async with self.db.transaction() as db:
            await db.execute(stmt)
