"""Toggle-State Engine — generic check-then-flip for like and follow relations.

Invariants:
    - The existence check and the flip run inside ONE write transaction; on SQLite it
      opens with BEGIN IMMEDIATE, so concurrent toggles by the same actor on the same
      target serialize and each one observes the previous one's result
    - Insert uses ON CONFLICT DO NOTHING: a duplicate key can never surface as an error
    - Self-follow is rejected before the transaction; liking a missing track is a 404
    - Like results carry a fresh post-commit count (may already include other users'
      concurrent toggles); follow results carry count=None
    - Fanout fires only on the toggled-on transition, only after commit

Design Decisions:
    - RelationSpec table instead of one code path per relation: like and follow differ
      only in model and column names
    - Follow emits no notification; only likes, comments, and uploads fan out
"""

import logging
from dataclasses import dataclass

from sqlalchemy import and_, delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from soundlike.core.domain_types import RelationKind, ToggleResult
from soundlike.core.enforce_social import check_not_self_follow
from soundlike.core.errors import ResourceNotFoundError, ValidationError
from soundlike.db.base import Base
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.models import Follow, Like, Track
from soundlike.services.notification_fanout import NotificationFanout
from soundlike.services.track_queries import count_likes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelationSpec:
    """Where a toggle relation lives: its model and (actor, target) columns."""
    model: type[Base]
    actor_column: str
    target_column: str

    def predicate(self, actor: str, target: str | int):
        return and_(
            getattr(self.model, self.actor_column) == actor,
            getattr(self.model, self.target_column) == target,
        )


RELATIONS: dict[RelationKind, RelationSpec] = {
    RelationKind.LIKE: RelationSpec(Like, "user_uid", "track_id"),
    RelationKind.FOLLOW: RelationSpec(Follow, "follower_uid", "following_uid"),
}


def _coerce_target(kind: RelationKind, target_id: str | int) -> str | int:
    if kind is RelationKind.LIKE:
        try:
            return int(target_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid track ID", "track_id")
    return str(target_id)


class ToggleEngine:
    """Flips like/follow relations atomically."""

    def __init__(
        self, db: DatabaseSessionManager, fanout: NotificationFanout | None = None,
    ):
        self.db = db
        self.fanout = fanout

    async def toggle(
        self,
        actor_uid: str,
        target_id: str | int,
        kind: RelationKind | str,
        actor_name: str | None = None,
    ) -> ToggleResult:
        kind = RelationKind(kind)
        spec = RELATIONS[kind]
        target = _coerce_target(kind, target_id)
        if kind is RelationKind.FOLLOW:
            error = check_not_self_follow(actor_uid, target)
            if error:
                raise error

        async with self.db.transaction() as db:
            if kind is RelationKind.LIKE:
                await self._require_track(db, target)
            was_active = await self._exists(db, spec, actor_uid, target)
            if was_active:
                await db.execute(
                    delete(spec.model).where(spec.predicate(actor_uid, target)),
                )
            else:
                await db.execute(
                    sqlite_insert(spec.model)
                    .values({spec.actor_column: actor_uid, spec.target_column: target})
                    .on_conflict_do_nothing(),
                )
        active = not was_active

        count = None
        if kind is RelationKind.LIKE:
            async with self.db.session() as db:
                count = await count_likes(db, target)

        logger.info(
            f"{kind.value} toggled {'on' if active else 'off'}",
            extra={"user_uid": actor_uid, "track_id": target if count is not None else None},
        )
        if active and kind is RelationKind.LIKE and self.fanout:
            self.fanout.on_track_liked(target, actor_uid, actor_name)
        return ToggleResult(kind=kind, active=active, count=count)

    async def is_active(
        self, actor_uid: str, target_id: str | int, kind: RelationKind | str,
    ) -> bool:
        kind = RelationKind(kind)
        async with self.db.session() as db:
            return await self._exists(
                db, RELATIONS[kind], actor_uid, _coerce_target(kind, target_id),
            )

    @staticmethod
    async def _exists(
        db: AsyncSession, spec: RelationSpec, actor: str, target: str | int,
    ) -> bool:
        result = await db.execute(
            select(select(spec.model).where(spec.predicate(actor, target)).exists()),
        )
        return bool(result.scalar())

    @staticmethod
    async def _require_track(db: AsyncSession, track_id: int) -> None:
        result = await db.execute(select(Track.id).where(Track.id == track_id))
        if result.scalar_one_or_none() is None:
            raise ResourceNotFoundError("Track", str(track_id))
