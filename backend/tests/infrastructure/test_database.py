"""Database Session Manager — tests for WAL, write transactions, and error mapping.

Tests cover:
    - Every connection runs in WAL mode with foreign keys enforced
    - transaction() commits on success and rolls back on exception
    - SQLAlchemy errors surface as TransactionError
    - health_check reports connectivity
"""

import pytest
from sqlalchemy import select, text

from soundlike.core.errors import TransactionError
from soundlike.models import Like, Track


async def test_wal_mode_enabled(db):
    async with db.session() as session:
        mode = (await session.execute(text("PRAGMA journal_mode"))).scalar_one()
    assert mode.lower() == "wal"


async def test_foreign_keys_enforced(db):
    with pytest.raises(TransactionError):
        async with db.transaction() as session:
            session.add(Like(user_uid="u1", track_id=999))


async def test_transaction_commits(db):
    async with db.transaction() as session:
        session.add(Track(filename="a.mp3", title="A", uploader_uid="u1"))
    async with db.session() as session:
        titles = (await session.execute(select(Track.title))).scalars().all()
    assert titles == ["A"]


async def test_transaction_rolls_back_on_exception(db):
    with pytest.raises(RuntimeError):
        async with db.transaction() as session:
            session.add(Track(filename="a.mp3", title="A", uploader_uid="u1"))
            await session.flush()
            raise RuntimeError("abort")
    async with db.session() as session:
        count = len((await session.execute(select(Track.id))).all())
    assert count == 0


async def test_unique_violation_maps_to_transaction_error(db):
    async with db.transaction() as session:
        session.add(Track(filename="a.mp3", title="A", uploader_uid="u1"))
    with pytest.raises(TransactionError) as exc:
        async with db.transaction() as session:
            session.add(Track(filename="a.mp3", title="B", uploader_uid="u2"))
    assert exc.value.code == "TRANSACTION_ERROR"


async def test_health_check(db):
    assert await db.health_check() is True
