"""
Bearer token verification against Firebase Authentication.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from firebase_admin import auth
from firebase_admin.exceptions import FirebaseError

from .exceptions import Unauthenticated

logger = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> str:
        """Return the verified email for token or raise Unauthenticated."""
        ...


def extract_bearer_token(header: Optional[str]) -> str:
    """Return the token of an 'Authorization: Bearer <token>' header value."""
    if not header:
        raise Unauthenticated()
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        raise Unauthenticated()
    return parts[1]


class FirebaseIdentityVerifier:
    """Verifies Firebase ID tokens; stateless, one provider call per request."""

    def __init__(self, app=None, check_revoked: bool = False):
        self.app = app
        self.check_revoked = check_revoked

    def verify(self, token: str) -> str:
        try:
            decoded = auth.verify_id_token(token, app=self.app, check_revoked=self.check_revoked)
        except (ValueError, FirebaseError) as e:
            logger.warning("Rejected identity token: %s", e)
            raise Unauthenticated() from e

        email = decoded.get('email')
        if not email:
            logger.warning("Verified token for uid %s carries no email", decoded.get('uid'))
            raise Unauthenticated()
        return email
