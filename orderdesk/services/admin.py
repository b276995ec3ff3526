"""
Admin Session Gate

Checks the shared admin password, remembers the admin device's push token
and issues a short-lived signed session token (HS256 JWT) that admin routes
require as `Authorization: Bearer <token>`.
"""

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from orderdesk.core.config import Settings
from orderdesk.core.errors import NotFound, Unauthorized, ValidationFailed
from orderdesk.store import SettingsStore

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_SUBJECT = "admin"
MIN_PUSH_TOKEN_LENGTH = 10


def is_usable_push_token(push_token: Any) -> bool:
    """Only strings longer than ten characters are kept."""
    return isinstance(push_token, str) and len(push_token) > MIN_PUSH_TOKEN_LENGTH


class AdminSessionGate:
    """Admin login and session verification."""

    def __init__(self, settings_store: SettingsStore, settings: Settings):
        self._store = settings_store
        self._secret = settings.admin_token_secret
        self._ttl = timedelta(minutes=settings.admin_token_ttl_minutes)
        self.auth_required = settings.admin_auth_required

    async def login(self, password: Optional[str], push_token: Any = None) -> str:
        """
        Check the password and return a session token.

        Raises:
            ValidationFailed: no password given
            NotFound: no admin profile exists
            Unauthorized: password mismatch (profile left untouched)
        """
        if not password:
            raise ValidationFailed("Password is required")

        admin = await self._store.get_admin()
        if admin is None:
            raise NotFound("Admin profile not found")

        if not hmac.compare_digest(password.encode("utf-8"), admin.password.encode("utf-8")):
            logger.warning("Admin login rejected: wrong password")
            raise Unauthorized("Wrong password")

        if is_usable_push_token(push_token):
            await self._store.record_admin_login(push_token=push_token)
            logger.info("Admin logged in; push token updated")
        else:
            if push_token is not None:
                logger.warning(f"Admin login: ignoring unusable push token {push_token!r}")
            await self._store.record_admin_login()
            logger.info("Admin logged in; push token unchanged")

        return self.issue_token()

    def issue_token(self) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": TOKEN_SUBJECT,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def verify(self, token: Optional[str]) -> dict[str, Any]:
        """
        Decode an admin session token.

        Raises:
            Unauthorized: missing, expired, tampered or non-admin token
        """
        if not token:
            raise Unauthorized("Admin session required")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Admin session expired")
        except jwt.InvalidTokenError:
            raise Unauthorized("Invalid admin session")

        if claims.get("sub") != TOKEN_SUBJECT:
            raise Unauthorized("Invalid admin session")
        return claims

    async def set_password(self, password: str) -> None:
        """Create the admin profile or replace its password."""
        if not password:
            raise ValidationFailed("Password is required")
        await self._store.set_admin_password(password)
        logger.info("Admin password set")
