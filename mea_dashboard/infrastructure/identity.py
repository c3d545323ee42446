"""
Identity collaborator.

The rest of the application treats the user id purely as a scoping key;
this module only decides how that key is obtained.
"""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass

from .config import IdentityConfig, get_settings
from .exceptions import AuthenticationError
from .logging import get_logger

logger = get_logger(__name__)

TOKEN_ID_LENGTH = 28


@dataclass(frozen=True, slots=True)
class Identity:
    user_id: str
    is_anonymous: bool = False

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise AuthenticationError("User identity must be a non-empty string")


class IdentityProvider:
    """Signs callers in either from a token or anonymously."""

    def __init__(self, config: IdentityConfig | None = None):
        self.config = config or get_settings().identity

    def sign_in(self, token: str | None = None) -> Identity:
        """
        Resolve an identity.

        A token always maps to the same opaque user id. Without a token a fresh
        anonymous id is issued, if the configuration allows it.

        Raises:
            AuthenticationError: If no token is given and anonymous sign-in is disabled
        """
        token = token if token is not None else self.config.initial_token
        if token is not None and token.strip():
            digest = hashlib.sha256(token.strip().encode("utf-8")).hexdigest()
            identity = Identity(user_id=digest[:TOKEN_ID_LENGTH])
            logger.info("Signed in with token", extra={"user_id": identity.user_id})
            return identity

        if not self.config.allow_anonymous:
            raise AuthenticationError("Anonymous sign-in is disabled and no token was supplied")

        identity = Identity(user_id=uuid.uuid4().hex, is_anonymous=True)
        logger.info("Signed in anonymously", extra={"user_id": identity.user_id})
        return identity
