"""Notification Fanout — best-effort event e-mails to followers and track owners.

Invariants:
    - on_* methods only enqueue; they are called strictly AFTER the triggering
      transaction committed, so a unit never announces uncommitted state
    - Audience is resolved at send time with a fresh read session: if the track was
      deleted in the meantime the unit exits quietly
    - The acting user is never notified about their own action
    - Recipients whose preference row says false are skipped; no row means "notify"
    - Any lookup or delivery failure, expected or not, is logged for that recipient
      and the loop moves on; no retry, no stored state touched

Design Decisions:
    - Delivery runs on NotificationDispatcher workers (bounded, failure-isolated)
    - One message rendered per event, reused for every recipient
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from soundlike.core.domain_types import NotificationEvent
from soundlike.core.errors import SoundLikeError
from soundlike.core.notification_messages import (
    MailMessage,
    build_comment_message,
    build_like_message,
    build_upload_message,
)
from soundlike.core.repository_protocols import IdentityProvider, MailTransport
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.infrastructure.notification_dispatcher import NotificationDispatcher
from soundlike.models import Follow, Track, UserSetting

logger = logging.getLogger(__name__)

ANONYMOUS_ACTOR = "Someone"


class NotificationFanout:
    """Schedules and delivers event notifications."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        identity: IdentityProvider,
        mail: MailTransport,
        dispatcher: NotificationDispatcher,
        frontend_url: str,
    ):
        self.db = db
        self.identity = identity
        self.mail = mail
        self.dispatcher = dispatcher
        self.frontend_url = frontend_url

    # ─── Scheduling (called by services after commit) ─────────────

    def on_track_uploaded(
        self, uploader_uid: str, uploader_name: str, track_title: str,
    ) -> None:
        self.dispatcher.submit(
            NotificationEvent.TRACK_UPLOADED.value,
            lambda: self.deliver_upload(uploader_uid, uploader_name, track_title),
        )

    def on_track_liked(
        self, track_id: int, liker_uid: str, liker_name: str | None,
    ) -> None:
        self.dispatcher.submit(
            NotificationEvent.TRACK_LIKED.value,
            lambda: self.deliver_like(track_id, liker_uid, liker_name),
        )

    def on_comment_posted(
        self, track_id: int, commenter_uid: str, commenter_name: str, content: str,
    ) -> None:
        self.dispatcher.submit(
            NotificationEvent.COMMENT_POSTED.value,
            lambda: self.deliver_comment(
                track_id, commenter_uid, commenter_name, content,
            ),
        )

    # ─── Delivery units ───────────────────────────────────────────

    async def deliver_upload(
        self, uploader_uid: str, uploader_name: str, track_title: str,
    ) -> int:
        """Notify every opted-in follower of the uploader. Returns mails sent."""
        async with self.db.session() as db:
            result = await db.execute(
                select(Follow.follower_uid)
                .where(Follow.following_uid == uploader_uid),
            )
            recipients = await self._filter_recipients(
                db, list(result.scalars()), actor_uid=uploader_uid,
            )
        message = build_upload_message(
            uploader_name, track_title, self.frontend_url,
        )
        return await self._send_all(
            recipients, message, NotificationEvent.TRACK_UPLOADED,
        )

    async def deliver_like(
        self, track_id: int, liker_uid: str, liker_name: str | None,
    ) -> int:
        """Notify the track owner about a new like."""
        owner_uid, title = await self._resolve_track_owner(track_id)
        if owner_uid is None:
            return 0
        async with self.db.session() as db:
            recipients = await self._filter_recipients(
                db, [owner_uid], actor_uid=liker_uid,
            )
        message = build_like_message(
            liker_name or ANONYMOUS_ACTOR, title, self.frontend_url,
        )
        return await self._send_all(
            recipients, message, NotificationEvent.TRACK_LIKED,
        )

    async def deliver_comment(
        self, track_id: int, commenter_uid: str, commenter_name: str, content: str,
    ) -> int:
        """Notify the track owner about a new comment."""
        owner_uid, title = await self._resolve_track_owner(track_id)
        if owner_uid is None:
            return 0
        async with self.db.session() as db:
            recipients = await self._filter_recipients(
                db, [owner_uid], actor_uid=commenter_uid,
            )
        message = build_comment_message(
            commenter_name, title, content, self.frontend_url,
        )
        return await self._send_all(
            recipients, message, NotificationEvent.COMMENT_POSTED,
        )

    # ─── Helpers ──────────────────────────────────────────────────

    async def _resolve_track_owner(self, track_id: int) -> tuple[str | None, str]:
        async with self.db.session() as db:
            row = (await db.execute(
                select(Track.uploader_uid, Track.title).where(Track.id == track_id),
            )).one_or_none()
        if row is None:
            logger.info(
                "Track gone before notification was sent",
                extra={"track_id": track_id},
            )
            return None, ""
        return row.uploader_uid, row.title

    @staticmethod
    async def _filter_recipients(
        db: AsyncSession, candidates: list[str], actor_uid: str,
    ) -> list[str]:
        """Drop the actor and anyone who explicitly opted out."""
        candidates = [uid for uid in dict.fromkeys(candidates) if uid != actor_uid]
        if not candidates:
            return []
        result = await db.execute(
            select(UserSetting.user_uid).where(
                UserSetting.user_uid.in_(candidates),
                UserSetting.email_notifications.is_(False),
            ),
        )
        opted_out = set(result.scalars())
        return [uid for uid in candidates if uid not in opted_out]

    async def _send_all(
        self, recipients: list[str], message: MailMessage, event: NotificationEvent,
    ) -> int:
        sent = 0
        for uid in recipients:
            if await self._send_one(uid, message, event):
                sent += 1
        return sent

    async def _send_one(
        self, uid: str, message: MailMessage, event: NotificationEvent,
    ) -> bool:
        try:
            email = await self.identity.get_email(uid)
            if not email:
                return False
            await self.mail.send(email, message.subject, message.html_body)
        except SoundLikeError as e:
            logger.warning(
                f"Notification delivery failed: {e.message}",
                extra={
                    "event": "cleanup_warning", "user_uid": uid,
                    "notification": event.value, "error_code": e.code,
                },
            )
            return False
        except Exception as e:
            # One recipient's failure must not cost the rest of the audience
            logger.warning(
                f"Notification delivery failed unexpectedly: {e}",
                exc_info=True,
                extra={
                    "event": "cleanup_warning", "user_uid": uid,
                    "notification": event.value,
                },
            )
            return False
        logger.info(
            "Notification sent",
            extra={"user_uid": uid, "notification": event.value},
        )
        return True
