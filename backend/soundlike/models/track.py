"""Track ORM — metadata row for one uploaded audio blob.

Invariants:
    - filename is UNIQUE and opaque (uuid hex + canonical extension), never user text
    - A live row's filename always exists in the blob store
    - uploader_name is a denormalized copy of the owner's display name

Design Decisions:
    - Integer autoincrement id: track ids appear in public URLs (/api/track/{id})
    - likes_count / is_liked are NOT columns: computed at read time (services/track_queries.py)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from soundlike.db.base import Base


class Track(Base):
    """Uploaded track metadata."""
    __tablename__ = "tracks"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    filename: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    artist: Mapped[str | None] = mapped_column(String(100), nullable=True)
    lyrics: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploader_uid: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True,
    )
    uploader_name: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
