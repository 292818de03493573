"""Follow ORM — toggle relation between two users.

Invariants:
    - Composite PK (follower_uid, following_uid): at most one edge per ordered pair
    - follower_uid != following_uid (CHECK constraint, also rejected before the transaction)
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from soundlike.db.base import Base


class Follow(Base):
    """Directed follow edge: follower_uid follows following_uid."""
    __tablename__ = "follows"
    __table_args__ = (
        CheckConstraint(
            "follower_uid <> following_uid", name="ck_follows_not_self",
        ),
    )

    follower_uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    following_uid: Mapped[str] = mapped_column(
        String(128), primary_key=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
