"""Local Blob Store — opaque-name file storage for track audio.

Invariants:
    - Names are bare opaque tokens: no path separators, no leading dot, no traversal
    - write() is all-or-nothing: data lands in a temp sibling, is fsynced, then
      os.replace()d into place, so a name is either fully present or absent
    - delete() of a missing name raises StorageError (callers decide whether that matters)
    - No metadata awareness: the store never reads or writes the database

Design Decisions:
    - Blocking filesystem calls run in asyncio.to_thread: a slow disk never stalls
      the event loop (and never holds a DB transaction, see services/)
    - uuid4 hex names: collision-resistant and never derived from user input
"""

import asyncio
import logging
import os
import uuid
from pathlib import Path

from soundlike.core.domain_types import AudioFormat, BlobName
from soundlike.core.errors import StorageError

logger = logging.getLogger(__name__)


def generate_blob_name(audio_format: AudioFormat) -> BlobName:
    """Collision-resistant opaque name with the canonical extension."""
    return BlobName(uuid.uuid4().hex + audio_format.value)


class LocalBlobStore:
    """Blob store backed by one local directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True, mode=0o700)

    def path_for(self, name: str) -> Path:
        """Resolve a blob name to its path, rejecting anything that is not opaque."""
        if (
            not name
            or name.startswith(".")
            or os.sep in name
            or (os.altsep and os.altsep in name)
            or name != os.path.basename(name)
        ):
            raise StorageError(f"invalid blob name {name!r}", "resolve")
        return self.root / name

    async def write(self, name: str, data: bytes) -> None:
        path = self.path_for(name)
        try:
            await asyncio.to_thread(self._write_atomic, path, data)
        except OSError as e:
            logger.error(
                f"Blob write failed: {e}", extra={"blob_name": name},
            )
            raise StorageError("could not persist file", "write") from e
        logger.info("Blob written", extra={"blob_name": name})

    async def delete(self, name: str) -> None:
        path = self.path_for(name)
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as e:
            raise StorageError(str(e), "delete") from e
        logger.info("Blob deleted", extra={"blob_name": name})

    async def exists(self, name: str) -> bool:
        return await asyncio.to_thread(self.path_for(name).is_file)

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            with open(tmp, "xb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
