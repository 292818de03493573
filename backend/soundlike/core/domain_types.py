"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - TrackId wraps the integer row id used in public URLs
    - BlobName is an opaque store name, never user-supplied text
    - All valid relation kinds and audio formats encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

TrackId = NewType("TrackId", int)
BlobName = NewType("BlobName", str)


# ─── Enums ───────────────────────────────────────────────────────

class RelationKind(str, Enum):
    """Toggle relations — a row's existence IS the state."""
    LIKE = "like"
    FOLLOW = "follow"


class AudioFormat(str, Enum):
    """Accepted upload formats. Value is the canonical blob extension."""
    MP3 = ".mp3"
    WAV = ".wav"
    OGG = ".ogg"
    FLAC = ".flac"
    M4A = ".m4a"


class NotificationEvent(str, Enum):
    """Events that trigger a fanout unit."""
    TRACK_UPLOADED = "track_uploaded"
    TRACK_LIKED = "track_liked"
    COMMENT_POSTED = "comment_posted"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class TrackRef:
    """Result of a committed upload: the row id and its blob reference."""
    id: TrackId
    filename: BlobName


@dataclass(frozen=True)
class ToggleResult:
    """New relation state after a toggle. count is only set for likes."""
    kind: RelationKind
    active: bool
    count: int | None = None


@dataclass(frozen=True)
class AccountDeletionReport:
    """What an account deletion removed, and which blobs were left behind."""
    tracks_deleted: int
    blobs_failed: tuple[str, ...] = ()
