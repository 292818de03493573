"""Upload Validation — tests for pure upload precondition checks.

Tests cover:
    - identify_audio_format parses each supported container and rejects text
    - A valid audio prefix followed by markup is not accepted as audio
    - check_* length limits for title, artist, lyrics (measured after trimming)
    - check_payload_size rejects empty and oversized payloads
    - check_audio_type requires an allowed extension that agrees with the content
    - validate_upload chains all checks — first error wins
"""

import io
import wave

import pytest

from soundlike.core.domain_types import AudioFormat
from soundlike.core.enforce_upload import (
    MAX_LYRICS_LENGTH,
    MAX_TITLE_LENGTH,
    check_artist,
    check_audio_type,
    check_lyrics,
    check_owner_name,
    check_payload_size,
    check_title,
    identify_audio_format,
    validate_upload,
)
from soundlike.core.errors import ValidationError

# Eight MPEG-1 Layer III frames: 32 kbps, 44.1 kHz, 104 bytes each
MP3 = (b"\xff\xfb\x10\x00" + b"\x00" * 100) * 8
ALL_FORMATS = frozenset(AudioFormat)


def _wav() -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as out:
        out.setnchannels(1)
        out.setsampwidth(2)
        out.setframerate(8000)
        out.writeframes(b"\x00\x00" * 800)
    return buf.getvalue()


def _flac() -> bytes:
    # STREAMINFO: 44.1 kHz, 2 channels, 16 bits, one second of samples
    packed = (44100 << 44) | (1 << 41) | (15 << 36) | 44100
    streaminfo = (
        (4096).to_bytes(2, "big") * 2
        + b"\x00" * 6
        + packed.to_bytes(8, "big")
        + b"\x00" * 16
    )
    return b"fLaC" + b"\x80" + len(streaminfo).to_bytes(3, "big") + streaminfo


# ─── identify_audio_format ───────────────────────────────────────

@pytest.mark.parametrize("data, ext, expected", [
    (MP3, ".mp3", AudioFormat.MP3),
    (_wav(), ".wav", AudioFormat.WAV),
    (_flac(), ".flac", AudioFormat.FLAC),
])
def test_identify_recognizes_audio_containers(data, ext, expected):
    assert identify_audio_format(data, ext) is expected


@pytest.mark.parametrize("data, ext", [
    (b"<html><script>alert(1)</script>", ".mp3"),
    (b'{"not": "audio"}', ".ogg"),
    (b"RIFF\x24\x08\x00\x00AVI LIST" + b"\x00" * 64, ".wav"),
    (b"OggS\x00\x02" + b"\x00" * 64, ".ogg"),
    (b"\x00\x00\x00\x20ftypM4A " + b"\x00" * 64, ".m4a"),
    (b"", ".mp3"),
])
def test_identify_rejects_non_audio(data, ext):
    assert identify_audio_format(data, ext) is None


@pytest.mark.parametrize("prefix, ext", [
    (b"ID3", ".mp3"),
    (b"fLaC", ".flac"),
    (b"RIFF\x00\x00\x00\x00WAVE", ".wav"),
])
def test_identify_rejects_markup_behind_audio_prefix(prefix, ext):
    data = prefix + b"<html><script>alert(1)</script></html>" * 10
    assert identify_audio_format(data, ext) is None


def test_validate_upload_rejects_markup_behind_id3_prefix():
    with pytest.raises(ValidationError) as exc:
        validate_upload(
            title="Song", artist="", lyrics="", owner_name="Ana",
            filename="evil.mp3",
            data=b"ID3" + b"<html><script>alert(1)</script></html>" * 10,
        )
    assert exc.value.message == "Invalid file type detected"
# ─── Field checks ────────────────────────────────────────────────

def test_title_required():
    error = check_title("   ")
    assert error is not None
    assert error.field == "title"
    assert error.message == "Title is required"


def test_title_at_limit_is_accepted():
    assert check_title("x" * MAX_TITLE_LENGTH) is None


def test_title_over_limit_rejected():
    error = check_title("x" * (MAX_TITLE_LENGTH + 1))
    assert error.message == "Title is too long (max 100 chars)"


def test_title_limit_measured_after_trimming():
    assert check_title("  " + "x" * MAX_TITLE_LENGTH + "\n") is None
    assert check_artist(" " + "a" * 100 + " ") is None


def test_artist_optional_but_bounded():
    assert check_artist(None) is None
    assert check_artist("") is None
    assert check_artist("a" * 101).field == "artist"


def test_lyrics_bounded():
    assert check_lyrics("la " * 100) is None
    assert check_lyrics("l" * (MAX_LYRICS_LENGTH + 1)).field == "lyrics"


def test_owner_name_required():
    assert check_owner_name(None).field == "display_name"
    assert check_owner_name("  ").field == "display_name"
    assert check_owner_name("Ana") is None


def test_payload_size_rejects_empty_and_oversized():
    assert check_payload_size(0, 1024).message == "File is empty"
    assert check_payload_size(1024, 1024) is None
    error = check_payload_size(15 * 1024 * 1024 + 1, 15 * 1024 * 1024)
    assert error.message == "File is too large (max 15MB)"


# ─── check_audio_type ────────────────────────────────────────────

def test_audio_type_accepts_matching_extension_case_insensitively():
    fmt, error = check_audio_type("My Song.MP3", MP3, ALL_FORMATS)
    assert error is None
    assert fmt is AudioFormat.MP3


def test_audio_type_rejects_disallowed_extension():
    fmt, error = check_audio_type("song.wav", MP3, frozenset({AudioFormat.MP3}))
    assert fmt is None
    assert error.message == "Only .mp3 files are allowed"


def test_audio_type_rejects_extension_content_mismatch():
    _, error = check_audio_type("song.wav", MP3, ALL_FORMATS)
    assert error.message == "Invalid file type detected"


def test_audio_type_rejects_html_disguised_as_mp3():
    _, error = check_audio_type("song.mp3", b"<html></html>", ALL_FORMATS)
    assert error.message == "Invalid file type detected"


def test_audio_type_rejects_missing_extension():
    _, error = check_audio_type("song", MP3, ALL_FORMATS)
    assert error is not None


# ─── validate_upload ─────────────────────────────────────────────

def _upload(**overrides):
    fields = dict(
        title="Song", artist="Band", lyrics="", owner_name="Ana",
        filename="song.mp3", data=MP3, max_bytes=1024, allowed=ALL_FORMATS,
    )
    fields.update(overrides)
    return validate_upload(**fields)


def test_validate_upload_returns_detected_format():
    assert _upload() is AudioFormat.MP3


def test_validate_upload_missing_display_name_wins_over_title():
    with pytest.raises(ValidationError) as exc:
        _upload(owner_name="", title="")
    assert exc.value.field == "display_name"


def test_validate_upload_size_checked_before_content_type():
    with pytest.raises(ValidationError) as exc:
        _upload(data=b"<html>" * 1000, max_bytes=100)
    assert exc.value.message.startswith("File is too large")


def test_validate_upload_rejects_wrong_content():
    with pytest.raises(ValidationError) as exc:
        _upload(data=b"plain text pretending")
    assert exc.value.http_status == 400
