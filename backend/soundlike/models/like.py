"""Like ORM — toggle relation between a user and a track.

Invariants:
    - At most one row per (user_uid, track_id): the row's existence IS the state
    - track_id must reference a live track (FK, enforced by PRAGMA foreign_keys)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from soundlike.db.base import Base


class Like(Base):
    """A user's like on a track."""
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_uid", "track_id", name="uq_likes_user_track"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_uid: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    track_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tracks.id"), nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
