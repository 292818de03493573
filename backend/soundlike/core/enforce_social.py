"""Social Validation — pure checks for comments, follows, and profile names.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - check_* return ValidationError on violation, None on success
"""

from soundlike.core.errors import ValidationError

MIN_COMMENT_LENGTH = 1
MAX_COMMENT_LENGTH = 500
MAX_DISPLAY_NAME_LENGTH = 30


def check_comment_content(content: str | None) -> ValidationError | None:
    if not content or len(content) > MAX_COMMENT_LENGTH:
        return ValidationError(
            f"Comment must be between {MIN_COMMENT_LENGTH} and "
            f"{MAX_COMMENT_LENGTH} characters.",
            "content",
        )
    return None


def check_not_self_follow(actor_uid: str, target_uid: str) -> ValidationError | None:
    if actor_uid == target_uid:
        return ValidationError("You cannot follow yourself.", "uid")
    return None


def normalize_display_name(raw: str | None) -> str:
    """Strip and validate a requested display name. Raises ValidationError."""
    name = (raw or "").strip()
    if not name:
        raise ValidationError("Display name cannot be empty", "display_name")
    if len(name) > MAX_DISPLAY_NAME_LENGTH:
        raise ValidationError(
            f"Display name is too long (max {MAX_DISPLAY_NAME_LENGTH} chars)",
            "display_name",
        )
    return name
