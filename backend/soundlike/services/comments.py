"""Comment Service — post and delete comments on tracks.

Invariants:
    - Content length validated before any mutation
    - Posting requires the track to exist at insert time (checked inside the transaction)
    - Only the author may delete a comment; "missing" and "not yours" are the same answer
    - Owner notification scheduled only after commit
"""

import logging

from sqlalchemy import delete, select

from soundlike.core.enforce_social import check_comment_content
from soundlike.core.errors import (
    AuthorizationError, ResourceNotFoundError, ValidationError,
)
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.models import Comment, Track
from soundlike.services.notification_fanout import NotificationFanout

logger = logging.getLogger(__name__)


class CommentService:

    def __init__(
        self, db: DatabaseSessionManager, fanout: NotificationFanout | None = None,
    ):
        self.db = db
        self.fanout = fanout

    async def post_comment(
        self, author_uid: str, author_name: str | None, track_id: int, content: str,
    ) -> Comment:
        if not author_name or not author_name.strip():
            raise ValidationError("Display name is required to comment.", "display_name")
        error = check_comment_content(content)
        if error:
            raise error

        async with self.db.transaction() as db:
            found = await db.execute(select(Track.id).where(Track.id == track_id))
            if found.scalar_one_or_none() is None:
                raise ResourceNotFoundError("Track", str(track_id))
            comment = Comment(
                track_id=track_id,
                user_uid=author_uid,
                user_name=author_name.strip(),
                content=content,
            )
            db.add(comment)
            await db.flush()

        logger.info(
            "Comment posted", extra={"user_uid": author_uid, "track_id": track_id},
        )
        if self.fanout:
            self.fanout.on_comment_posted(
                track_id, author_uid, comment.user_name, content,
            )
        return comment

    async def delete_comment(self, author_uid: str, comment_id: int) -> None:
        async with self.db.transaction() as db:
            result = await db.execute(
                delete(Comment).where(
                    Comment.id == comment_id, Comment.user_uid == author_uid,
                ),
            )
            if result.rowcount == 0:
                raise AuthorizationError(
                    "Cannot delete comment (not found or not yours)",
                )
