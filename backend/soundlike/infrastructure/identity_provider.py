"""Firebase Identity Provider — token verification and profile lookups via firebase-admin.

Invariants:
    - verify_token raises AuthenticationError for any invalid/expired/revoked token
    - get_email returns None for unknown users (caller treats as "no recipient")
    - All other provider failures mapped to IdentityProviderError
    - firebase-admin is synchronous: every call runs in asyncio.to_thread

Design Decisions:
    - Named firebase app per provider instance: tests and multiple processes never
      collide on the default app registry
    - Credentials come from GOOGLE_APPLICATION_CREDENTIALS (Application Default
      Credentials), never from settings
"""

import asyncio
import logging

import firebase_admin
from firebase_admin import auth
from firebase_admin.exceptions import FirebaseError

from soundlike.core.errors import AuthenticationError, IdentityProviderError
from soundlike.core.repository_protocols import VerifiedIdentity

logger = logging.getLogger(__name__)


class FirebaseIdentityProvider:
    """IdentityProvider backed by Firebase Authentication."""

    APP_NAME = "soundlike"

    def __init__(self, project_id: str | None = None):
        options = {"projectId": project_id} if project_id else None
        try:
            self._app = firebase_admin.get_app(self.APP_NAME)
        except ValueError:
            self._app = firebase_admin.initialize_app(
                options=options, name=self.APP_NAME,
            )

    async def verify_token(self, token: str) -> VerifiedIdentity:
        try:
            claims = await asyncio.to_thread(
                auth.verify_id_token, token, app=self._app,
            )
        except (ValueError, auth.InvalidIdTokenError, auth.CertificateFetchError) as e:
            logger.warning(f"Rejected ID token: {e}")
            raise AuthenticationError("Invalid ID token")
        except FirebaseError as e:
            logger.error(f"Token verification failed: {e}")
            raise IdentityProviderError(str(e), "verify_token")
        return VerifiedIdentity(
            uid=claims["uid"],
            email_verified=bool(claims.get("email_verified", False)),
            display_name=claims.get("name") or None,
            email=claims.get("email"),
        )

    async def get_email(self, uid: str) -> str | None:
        try:
            record = await asyncio.to_thread(auth.get_user, uid, app=self._app)
        except auth.UserNotFoundError:
            return None
        except FirebaseError as e:
            raise IdentityProviderError(str(e), "get_user")
        return record.email or None

    async def update_display_name(self, uid: str, display_name: str) -> None:
        try:
            await asyncio.to_thread(
                auth.update_user, uid, display_name=display_name, app=self._app,
            )
        except FirebaseError as e:
            logger.error(
                f"Failed to update display name: {e}", extra={"user_uid": uid},
            )
            raise IdentityProviderError(str(e), "update_user")
