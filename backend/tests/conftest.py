"""Root conftest — shared fixtures: temp SQLite store, blob dir, boundary fakes.

Invariants:
    - Every test gets a fresh temp-FILE SQLite database (WAL and BEGIN IMMEDIATE need
      real files; :memory: would give each pooled connection its own database)
    - Boundary fakes satisfy the core/repository_protocols.py Protocols structurally
    - The dispatcher fixture is started and stopped per test
"""

import os
from uuid import uuid4

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./data/test.db")
os.environ.setdefault("DATABASE_AUTO_CREATE", "false")
os.environ.setdefault("LOG_FORMAT", "text")

from soundlike.config import Settings  # noqa: E402
from soundlike.core.errors import (  # noqa: E402
    AuthenticationError, IdentityProviderError, MailDeliveryError, StorageError,
)
from soundlike.core.repository_protocols import VerifiedIdentity  # noqa: E402
from soundlike.infrastructure.blob_store import LocalBlobStore  # noqa: E402
from soundlike.infrastructure.database import DatabaseSessionManager  # noqa: E402
from soundlike.infrastructure.notification_dispatcher import (  # noqa: E402
    NotificationDispatcher,
)
from soundlike.models import Track  # noqa: E402
from soundlike.services.notification_fanout import NotificationFanout  # noqa: E402

FRONTEND_URL = "http://frontend.test"
SEED_AUDIO = (b"\xff\xfb\x10\x00" + b"\x00" * 100) * 8


# ─── Boundary fakes ──────────────────────────────────────────────

class FakeIdentityProvider:
    """In-memory identity provider keyed by bearer token."""

    def __init__(self):
        self.tokens: dict[str, VerifiedIdentity] = {}
        self.emails: dict[str, str] = {}
        self.display_names: dict[str, str] = {}
        self.failing_lookups: set[str] = set()
        self.malformed_uids: set[str] = set()
        self.fail_updates = False

    def add_user(
        self,
        uid: str,
        display_name: str | None = None,
        email: str | None = None,
        verified: bool = True,
    ) -> str:
        """Register a user and return a bearer token for them."""
        token = f"token-{uid}"
        self.tokens[token] = VerifiedIdentity(uid, verified, display_name, email)
        if email:
            self.emails[uid] = email
        return token

    async def verify_token(self, token: str) -> VerifiedIdentity:
        try:
            return self.tokens[token]
        except KeyError:
            raise AuthenticationError("Invalid ID token")

    async def get_email(self, uid: str) -> str | None:
        if uid in self.malformed_uids:
            raise ValueError("malformed uid")
        if uid in self.failing_lookups:
            raise IdentityProviderError("user lookup failed", "get_user")
        return self.emails.get(uid)

    async def update_display_name(self, uid: str, display_name: str) -> None:
        if self.fail_updates:
            raise IdentityProviderError("update refused", "update_user")
        self.display_names[uid] = display_name


class RecordingMailTransport:
    """Collects sent messages; raises for addresses listed in failing."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.failing: set[str] = set()

    async def send(self, to: str, subject: str, html_body: str) -> None:
        if to in self.failing:
            raise MailDeliveryError("connection refused", to)
        self.sent.append((to, subject, html_body))

    @property
    def recipients(self) -> list[str]:
        return [to for to, _, _ in self.sent]


class FlakyBlobStore(LocalBlobStore):
    """LocalBlobStore whose write/delete can be made to fail."""

    def __init__(self, root):
        super().__init__(root)
        self.fail_writes = False
        self.fail_deletes = False

    async def write(self, name: str, data: bytes) -> None:
        if self.fail_writes:
            raise StorageError("disk full", "write")
        await super().write(name, data)

    async def delete(self, name: str) -> None:
        if self.fail_deletes:
            raise StorageError("permission denied", "delete")
        await super().delete(name)


# ─── Component fixtures ──────────────────────────────────────────

@pytest.fixture
async def db(tmp_path):
    manager = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'soundlike.db'}",
        pool_size=5, max_overflow=5, busy_timeout_seconds=10.0,
    )
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest.fixture
def blob_store(tmp_path):
    return FlakyBlobStore(tmp_path / "uploads")


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def mail():
    return RecordingMailTransport()


@pytest.fixture
async def dispatcher():
    dispatcher = NotificationDispatcher(workers=2, queue_size=100)
    dispatcher.start()
    yield dispatcher
    await dispatcher.stop(drain=False)


@pytest.fixture
def fanout(db, identity, mail, dispatcher):
    return NotificationFanout(db, identity, mail, dispatcher, FRONTEND_URL)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'soundlike.db'}",
        uploads_dir=str(tmp_path / "uploads"),
        frontend_url=FRONTEND_URL,
    )


# ─── Seed helpers ────────────────────────────────────────────────

@pytest.fixture
def make_track(db, blob_store):
    """Insert a track row (and its blob) directly, bypassing upload validation."""

    async def _make(
        uploader_uid: str = "owner",
        uploader_name: str | None = "Owner",
        title: str = "Song",
    ) -> Track:
        filename = f"{uuid4().hex}.mp3"
        await blob_store.write(filename, SEED_AUDIO)
        async with db.transaction() as session:
            track = Track(
                filename=filename, title=title,
                uploader_uid=uploader_uid, uploader_name=uploader_name,
            )
            session.add(track)
            await session.flush()
        return track

    return _make


@pytest.fixture
def add_rows(db):
    """Insert arbitrary ORM rows in one transaction."""

    async def _add(*rows) -> None:
        async with db.transaction() as session:
            session.add_all(rows)

    return _add


@pytest.fixture
def count_rows(db):
    """Count rows of a model, optionally filtered."""
    from sqlalchemy import func, select

    async def _count(model, *where) -> int:
        async with db.session() as session:
            query = select(func.count()).select_from(model)
            if where:
                query = query.where(*where)
            result = await session.execute(query)
            return result.scalar_one()

    return _count
