"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Track is the only row that references a blob (tracks.filename)
    - Likes and comments reference tracks by FK; follows and settings reference
      identity-provider uids, which have no local table

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/alembic
    - FKs carry no ON DELETE CASCADE: dependents are removed explicitly, child-before-parent,
      by services/deletion.py so the ordering is visible in one place
"""

from soundlike.models.track import Track  # noqa: F401
from soundlike.models.like import Like  # noqa: F401
from soundlike.models.follow import Follow  # noqa: F401
from soundlike.models.comment import Comment  # noqa: F401
from soundlike.models.user_setting import UserSetting  # noqa: F401
