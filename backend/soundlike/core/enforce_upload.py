"""Upload Validation — checks every upload precondition before any mutation.

Invariants:
    - No DB, no async, no side effects; the payload is parsed from memory only
    - check_* functions return a ValidationError on violation, None on success
    - validate_upload chains all checks — first error wins — and raises it
    - The container is identified by mutagen from the payload itself; the client
      filename only has to agree with it, it never decides the stored name
    - Length limits apply to the trimmed text, which is what gets stored

Design Decisions:
    - mutagen parses the stream headers, not just a leading magic number: a valid
      prefix followed by HTML/JS is rejected
    - Parsers are restricted to the accepted containers, so ID3-only or video
      files never score a match
"""

import io
import os

from mutagen import File as MutagenFile
from mutagen.flac import FLAC
from mutagen.mp3 import MP3
from mutagen.mp4 import MP4
from mutagen.oggflac import OggFLAC
from mutagen.oggopus import OggOpus
from mutagen.oggvorbis import OggVorbis
from mutagen.wave import WAVE

from soundlike.core.domain_types import AudioFormat
from soundlike.core.errors import ValidationError

MAX_TITLE_LENGTH = 100
MAX_ARTIST_LENGTH = 100
MAX_LYRICS_LENGTH = 10_000
DEFAULT_MAX_UPLOAD_BYTES = 15 * 1024 * 1024

_AUDIO_TYPES = (
    (MP3, AudioFormat.MP3),
    (WAVE, AudioFormat.WAV),
    (OggVorbis, AudioFormat.OGG),
    (OggOpus, AudioFormat.OGG),
    (OggFLAC, AudioFormat.OGG),
    (FLAC, AudioFormat.FLAC),
    (MP4, AudioFormat.M4A),
)


def identify_audio_format(data: bytes, extension: str = "") -> AudioFormat | None:
    """Parse the payload with mutagen and return its container, or None.

    The extension only helps mutagen rank candidate parsers; the result still
    has to come from a successful parse.
    """
    buf = io.BytesIO(data)
    buf.name = f"upload{extension}"
    try:
        audio = MutagenFile(buf, options=[kind for kind, _ in _AUDIO_TYPES])
    except Exception:
        # mutagen raises assorted errors on malformed streams
        return None
    if audio is None:
        return None
    for kind, audio_format in _AUDIO_TYPES:
        if isinstance(audio, kind):
            return audio_format
    return None


def check_title(title: str | None) -> ValidationError | None:
    if not title or not title.strip():
        return ValidationError("Title is required", "title")
    if len(title.strip()) > MAX_TITLE_LENGTH:
        return ValidationError(
            f"Title is too long (max {MAX_TITLE_LENGTH} chars)", "title",
        )
    return None


def check_artist(artist: str | None) -> ValidationError | None:
    if artist and len(artist.strip()) > MAX_ARTIST_LENGTH:
        return ValidationError(
            f"Artist name is too long (max {MAX_ARTIST_LENGTH} chars)", "artist",
        )
    return None


def check_lyrics(lyrics: str | None) -> ValidationError | None:
    if lyrics and len(lyrics) > MAX_LYRICS_LENGTH:
        return ValidationError(
            f"Lyrics are too long (max {MAX_LYRICS_LENGTH} chars)", "lyrics",
        )
    return None


def check_owner_name(owner_name: str | None) -> ValidationError | None:
    if not owner_name or not owner_name.strip():
        return ValidationError(
            "You must set a display name before uploading.", "display_name",
        )
    return None


def check_payload_size(size: int, max_bytes: int) -> ValidationError | None:
    if size == 0:
        return ValidationError("File is empty", "file")
    if size > max_bytes:
        return ValidationError(
            f"File is too large (max {max_bytes // (1024 * 1024)}MB)", "file",
        )
    return None


def check_audio_type(
    filename: str, data: bytes, allowed: frozenset[AudioFormat],
) -> tuple[AudioFormat | None, ValidationError | None]:
    """Extension must be allowed AND agree with the parsed container."""
    ext = os.path.splitext(filename or "")[1].lower()
    allowed_exts = {fmt.value for fmt in allowed}
    if ext not in allowed_exts:
        return None, ValidationError(
            f"Only {', '.join(sorted(allowed_exts))} files are allowed", "file",
        )
    detected = identify_audio_format(data, ext)
    if detected is None or detected.value != ext or detected not in allowed:
        return None, ValidationError("Invalid file type detected", "file")
    return detected, None


def validate_upload(
    *,
    title: str | None,
    artist: str | None,
    lyrics: str | None,
    owner_name: str | None,
    filename: str,
    data: bytes,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    allowed: frozenset[AudioFormat] = frozenset(AudioFormat),
) -> AudioFormat:
    """Run every upload check; raise the first ValidationError, else return the format."""
    for error in (
        check_owner_name(owner_name),
        check_title(title),
        check_artist(artist),
        check_lyrics(lyrics),
        check_payload_size(len(data), max_bytes),
    ):
        if error:
            raise error
    audio_format, error = check_audio_type(filename, data, allowed)
    if error:
        raise error
    return audio_format
