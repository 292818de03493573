"""Cascading Deletion Orchestrator — removes a track or a whole account, then its blobs.

Invariants:
    - Authorization is checked on a fresh read BEFORE the transaction; a non-owner
      mutates nothing
    - Dependents are deleted child-before-parent inside ONE transaction
      (likes -> comments -> tracks), so no row ever references a missing track
    - Blobs are deleted strictly AFTER commit; a failed blob delete is logged as a
      cleanup warning and never undoes or fails the committed deletion
    - After delete_account no like, comment, follow, setting, or track row refers to the uid

Design Decisions:
    - Account blob names captured by a prior read, outside the transaction: the user's own
      request is the only legitimate writer of that uid's track set mid-request
    - Explicit statements instead of ORM/FK cascades: the deletion order is readable here
      and does not depend on database-level ON DELETE support
"""

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from soundlike.core.domain_types import AccountDeletionReport
from soundlike.core.errors import AuthorizationError, ResourceNotFoundError
from soundlike.core.repository_protocols import BlobStore
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.models import Comment, Follow, Like, Track, UserSetting

logger = logging.getLogger(__name__)


class DeletionOrchestrator:
    """Track-level and account-level cascading deletion."""

    def __init__(self, db: DatabaseSessionManager, blobs: BlobStore):
        self.db = db
        self.blobs = blobs

    async def delete_track(self, caller_uid: str, track_id: int) -> None:
        async with self.db.session() as db:
            row = (await db.execute(
                select(Track.filename, Track.uploader_uid).where(Track.id == track_id),
            )).one_or_none()
        if row is None:
            raise ResourceNotFoundError("Track", str(track_id))
        if row.uploader_uid != caller_uid:
            logger.warning(
                "Track deletion refused for non-owner",
                extra={"user_uid": caller_uid, "track_id": track_id},
            )
            raise AuthorizationError("You are not authorized to delete this track")

        async with self.db.transaction() as db:
            await db.execute(delete(Like).where(Like.track_id == track_id))
            await db.execute(delete(Comment).where(Comment.track_id == track_id))
            result = await db.execute(delete(Track).where(Track.id == track_id))
            if result.rowcount == 0:
                # deleted by a racing request between the read and the transaction
                raise ResourceNotFoundError("Track", str(track_id))

        logger.info(
            "Track deleted",
            extra={"user_uid": caller_uid, "track_id": track_id, "blob_name": row.filename},
        )
        await self._delete_blob(row.filename)

    async def delete_account(self, uid: str) -> AccountDeletionReport:
        async with self.db.session() as db:
            result = await db.execute(
                select(Track.filename).where(Track.uploader_uid == uid),
            )
            filenames = list(result.scalars())

        async with self.db.transaction() as db:
            await self._purge_account_rows(db, uid)

        logger.info(
            f"Account rows deleted ({len(filenames)} tracks)",
            extra={"user_uid": uid},
        )
        failed = [name for name in filenames if not await self._delete_blob(name)]
        return AccountDeletionReport(
            tracks_deleted=len(filenames), blobs_failed=tuple(failed),
        )

    @staticmethod
    async def _purge_account_rows(db: AsyncSession, uid: str) -> None:
        own_tracks = select(Track.id).where(Track.uploader_uid == uid)
        await db.execute(delete(Like).where(Like.user_uid == uid))
        await db.execute(delete(Like).where(Like.track_id.in_(own_tracks)))
        await db.execute(delete(Comment).where(Comment.user_uid == uid))
        await db.execute(delete(Comment).where(Comment.track_id.in_(own_tracks)))
        await db.execute(
            delete(Follow).where(
                or_(Follow.follower_uid == uid, Follow.following_uid == uid),
            ),
        )
        await db.execute(delete(UserSetting).where(UserSetting.user_uid == uid))
        await db.execute(delete(Track).where(Track.uploader_uid == uid))

    async def _delete_blob(self, name: str) -> bool:
        try:
            await self.blobs.delete(name)
        except Exception as e:
            logger.warning(
                f"Failed to delete blob after commit: {e}",
                extra={"event": "cleanup_warning", "blob_name": name},
            )
            return False
        return True
