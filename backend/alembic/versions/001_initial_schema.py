"""Initial schema — tracks, likes, follows, comments, user_settings.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tracks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("filename", sa.String(64), nullable=False, unique=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("artist", sa.String(100), nullable=True),
        sa.Column("lyrics", sa.Text, nullable=True),
        sa.Column("uploader_uid", sa.String(128), nullable=False),
        sa.Column("uploader_name", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_tracks_uploader_uid", "tracks", ["uploader_uid"])
    op.create_index("ix_tracks_uploader_name", "tracks", ["uploader_name"])

    op.create_table(
        "likes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_uid", sa.String(128), nullable=False),
        sa.Column("track_id", sa.Integer, sa.ForeignKey("tracks.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_uid", "track_id", name="uq_likes_user_track"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_likes_user_uid", "likes", ["user_uid"])
    op.create_index("ix_likes_track_id", "likes", ["track_id"])

    op.create_table(
        "follows",
        sa.Column("follower_uid", sa.String(128), primary_key=True),
        sa.Column("following_uid", sa.String(128), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("follower_uid <> following_uid", name="ck_follows_not_self"),
    )
    op.create_index("ix_follows_following_uid", "follows", ["following_uid"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("track_id", sa.Integer, sa.ForeignKey("tracks.id"), nullable=False),
        sa.Column("user_uid", sa.String(128), nullable=False),
        sa.Column("user_name", sa.String(100), nullable=False),
        sa.Column("content", sa.String(500), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_comments_track_id", "comments", ["track_id"])
    op.create_index("ix_comments_user_uid", "comments", ["user_uid"])

    op.create_table(
        "user_settings",
        sa.Column("user_uid", sa.String(128), primary_key=True),
        sa.Column("email_notifications", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("user_settings")
    op.drop_index("ix_comments_user_uid", "comments")
    op.drop_index("ix_comments_track_id", "comments")
    op.drop_table("comments")
    op.drop_index("ix_follows_following_uid", "follows")
    op.drop_table("follows")
    op.drop_index("ix_likes_track_id", "likes")
    op.drop_index("ix_likes_user_uid", "likes")
    op.drop_table("likes")
    op.drop_index("ix_tracks_uploader_name", "tracks")
    op.drop_index("ix_tracks_uploader_uid", "tracks")
    op.drop_table("tracks")
