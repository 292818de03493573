"""Upload Commit Protocol — blob write + metadata insert as one unit from the caller's view.

Invariants:
    - Validation runs before any mutation (ValidationError, nothing written)
    - Order is fixed: durable blob FIRST, then the metadata transaction
    - No Track row commits without a prior durable blob
    - If the metadata transaction fails for any reason, the just-written blob is deleted
      before the error propagates; if that cleanup fails it is logged, never raised
    - The "new upload" fanout is scheduled only after commit and never awaited

Design Decisions:
    - Display-name uniqueness re-checked INSIDE the insert transaction (BEGIN IMMEDIATE):
      two uploaders cannot race the same name onto live tracks
    - Blob write happens outside the transaction: a stalled disk never holds the DB lock
"""

import logging

from soundlike.core.domain_types import AudioFormat, BlobName, TrackId, TrackRef
from soundlike.core.enforce_upload import DEFAULT_MAX_UPLOAD_BYTES, validate_upload
from soundlike.core.errors import DisplayNameTakenError, SoundLikeError
from soundlike.core.repository_protocols import BlobStore
from soundlike.infrastructure.blob_store import generate_blob_name
from soundlike.infrastructure.database import DatabaseSessionManager
from soundlike.models import Track
from soundlike.services.notification_fanout import NotificationFanout
from soundlike.services.track_queries import display_name_owner

logger = logging.getLogger(__name__)


class UploadCommitService:
    """Persists an uploaded track atomically across blob store and metadata store."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        blobs: BlobStore,
        fanout: NotificationFanout | None = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        allowed_formats: frozenset[AudioFormat] = frozenset(AudioFormat),
    ):
        self.db = db
        self.blobs = blobs
        self.fanout = fanout
        self.max_upload_bytes = max_upload_bytes
        self.allowed_formats = allowed_formats

    async def commit_upload(
        self,
        owner_uid: str,
        owner_name: str | None,
        title: str | None,
        artist: str | None,
        lyrics: str | None,
        filename: str,
        data: bytes,
    ) -> TrackRef:
        audio_format = validate_upload(
            title=title, artist=artist, lyrics=lyrics, owner_name=owner_name,
            filename=filename, data=data,
            max_bytes=self.max_upload_bytes, allowed=self.allowed_formats,
        )
        title = title.strip()
        owner_name = owner_name.strip()

        blob_name = generate_blob_name(audio_format)
        await self.blobs.write(blob_name, data)

        try:
            track_id = await self._insert_track(
                blob_name, owner_uid, owner_name, title,
                (artist or "").strip() or None, lyrics or None,
            )
        except Exception as e:
            level = logging.WARNING if isinstance(e, SoundLikeError) else logging.ERROR
            logger.log(
                level, f"Track insert failed, discarding blob: {e}",
                extra={"user_uid": owner_uid, "blob_name": blob_name},
            )
            await self._discard_blob(blob_name)
            raise

        logger.info(
            "Track uploaded",
            extra={"user_uid": owner_uid, "track_id": track_id, "blob_name": blob_name},
        )
        if self.fanout:
            self.fanout.on_track_uploaded(owner_uid, owner_name, title)
        return TrackRef(id=TrackId(track_id), filename=blob_name)

    async def _insert_track(
        self,
        blob_name: BlobName,
        owner_uid: str,
        owner_name: str,
        title: str,
        artist: str | None,
        lyrics: str | None,
    ) -> int:
        async with self.db.transaction() as db:
            if await display_name_owner(db, owner_name, owner_uid):
                raise DisplayNameTakenError(owner_name)
            track = Track(
                filename=blob_name,
                title=title,
                artist=artist,
                lyrics=lyrics,
                uploader_uid=owner_uid,
                uploader_name=owner_name,
            )
            db.add(track)
            await db.flush()
            return track.id

    async def _discard_blob(self, blob_name: str) -> None:
        try:
            await self.blobs.delete(blob_name)
        except Exception as e:
            logger.warning(
                f"Orphan blob left after failed insert: {e}",
                extra={"event": "cleanup_warning", "blob_name": blob_name},
            )
