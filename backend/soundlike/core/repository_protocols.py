"""Boundary Protocols — contracts between core services and the outside world.

Invariants:
    - Services depend on these Protocols, never on Firebase/SMTP/filesystem classes directly
    - Implementations are provided by infrastructure/ and injected at startup
    - All boundary methods are async because implementations do IO

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class VerifiedIdentity:
    """What the identity provider tells us about a bearer token."""
    uid: str
    email_verified: bool
    display_name: str | None
    email: str | None


class IdentityProvider(Protocol):
    """External identity provider — token verification and profile lookups."""
    async def verify_token(self, token: str) -> VerifiedIdentity: ...
    async def get_email(self, uid: str) -> str | None: ...
    async def update_display_name(self, uid: str, display_name: str) -> None: ...


class MailTransport(Protocol):
    """Outbound mail delivery. Raises MailDeliveryError on failure."""
    async def send(self, to: str, subject: str, html_body: str) -> None: ...


class BlobStore(Protocol):
    """Opaque-name binary storage with no metadata awareness."""
    async def write(self, name: str, data: bytes) -> None: ...
    async def delete(self, name: str) -> None: ...
    async def exists(self, name: str) -> bool: ...
