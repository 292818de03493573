"""UserSetting ORM — per-user notification preference.

Invariants:
    - Absence of a row means notifications are ON (a valid state, not an error)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from soundlike.db.base import Base


class UserSetting(Base):
    __tablename__ = "user_settings"

    user_uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email_notifications: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
