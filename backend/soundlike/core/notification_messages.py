"""Notification Messages — subject/body builders for event e-mails.

Invariants:
    - All functions are pure (no IO, no async, no DB)
    - Every user-supplied string is HTML-escaped before it reaches a body
    - Every body ends with the unsubscribe footer pointing at frontend_url

Design Decisions:
    - Subjects keep the raw (unescaped) text: mail clients render subjects as plain text
"""

from dataclasses import dataclass
from html import escape

_FOOTER = (
    '<hr style="border: 0; border-top: 1px solid #eee; margin: 20px 0;">'
    '<p style="font-size: 12px; color: #888;">Don\'t want these emails? '
    '<a href="{url}" style="color: #888;">Unsubscribe</a> in your profile settings.</p>'
)


@dataclass(frozen=True)
class MailMessage:
    subject: str
    html_body: str


def _wrap(heading: str, paragraphs: list[str], frontend_url: str) -> str:
    url = escape(frontend_url, quote=True)
    parts = [f"<h2>{heading}</h2>", "<p>Hello!</p>", *paragraphs]
    parts.append(f'<p><a href="{url}">Check it out on SoundLike!</a></p>')
    parts.append(_FOOTER.format(url=url))
    return "\n".join(parts)


def build_upload_message(
    uploader_name: str, track_title: str, frontend_url: str,
) -> MailMessage:
    """Sent to each follower of the uploader."""
    name, title = escape(uploader_name), escape(track_title)
    return MailMessage(
        subject=f"New track from {uploader_name}! 🎵",
        html_body=_wrap(
            f"New track from {name}! 🎵",
            [f'<p><strong>{name}</strong> has uploaded a new track: '
             f'"<strong>{title}</strong>".</p>'],
            frontend_url,
        ),
    )


def build_like_message(
    liker_name: str, track_title: str, frontend_url: str,
) -> MailMessage:
    """Sent to the track owner."""
    name, title = escape(liker_name), escape(track_title)
    return MailMessage(
        subject=f'New like on "{track_title}" 💖',
        html_body=_wrap(
            f'New like on "{title}" 💖',
            [f'<p><strong>{name}</strong> liked your track '
             f'"<strong>{title}</strong>".</p>'],
            frontend_url,
        ),
    )


def build_comment_message(
    commenter_name: str, track_title: str, content: str, frontend_url: str,
) -> MailMessage:
    """Sent to the track owner; quotes the comment."""
    name, title = escape(commenter_name), escape(track_title)
    return MailMessage(
        subject=f'New comment on "{track_title}" 💬',
        html_body=_wrap(
            f'New comment on "{title}" 💬',
            [
                f'<p><strong>{name}</strong> commented on your track '
                f'"<strong>{title}</strong>":</p>',
                '<blockquote style="border-left: 4px solid #ccc; '
                f'padding-left: 10px; color: #555;">{escape(content)}</blockquote>',
            ],
            frontend_url,
        ),
    )
