"""
Import authorization: actor permission and anti-forgery tokens.

Tokens are HMAC-SHA256 signatures over (tick, action, actor). A tick
lasts 12 hours and the current and previous ticks are accepted, so a
token stays valid for 12-24 hours after it was issued.
"""

import hashlib
import hmac
import math
import time
from typing import Callable, Optional
import structlog

from config.settings import settings
from exceptions import AuthorizationError

logger = structlog.get_logger(__name__)

IMPORT_ACTION = "bulk_csv_import"
TOKEN_LIFETIME_SECONDS = 24 * 60 * 60


class ImportAuthorizer:
    """Issue and verify import tokens; check who may run imports."""

    def __init__(
        self,
        secret: Optional[str] = None,
        allowed_actors: Optional[list[str]] = None,
        clock: Callable[[], float] = time.time
    ):
        self.secret = (secret or settings.import_token_secret).encode("utf-8")
        self.allowed_actors = set(
            allowed_actors if allowed_actors is not None else settings.import_allowed_actors
        )
        self.clock = clock

    def _tick(self) -> int:
        return math.ceil(self.clock() / (TOKEN_LIFETIME_SECONDS / 2))

    def _sign(self, tick: int, actor: str) -> str:
        message = f"{tick}|{IMPORT_ACTION}|{actor}".encode("utf-8")
        return hmac.new(self.secret, message, hashlib.sha256).hexdigest()

    def issue_token(self, actor: str) -> str:
        """Token for the upload form shown to this actor."""
        return self._sign(self._tick(), actor)

    def verify_token(self, actor: str, token: Optional[str]) -> bool:
        """True if the token was issued to this actor within the last two ticks."""
        if not token:
            return False
        tick = self._tick()
        return any(
            hmac.compare_digest(self._sign(t, actor), token)
            for t in (tick, tick - 1)
        )

    def authorize(self, actor: Optional[str], token: Optional[str]) -> None:
        """
        Check that the actor may run an import with this token.

        Raises:
            AuthorizationError: Unknown actor, actor not allowed, or bad token
        """
        if not actor:
            logger.warning("import_denied", reason="no_actor")
            raise AuthorizationError("You do not have permission to import products.")

        if self.allowed_actors and actor not in self.allowed_actors:
            logger.warning("import_denied", reason="actor_not_allowed", actor=actor)
            raise AuthorizationError(
                "You do not have permission to import products.",
                details={"actor": actor}
            )

        if not self.verify_token(actor, token):
            logger.warning("import_denied", reason="invalid_token", actor=actor)
            raise AuthorizationError("Token verification failed.")

        logger.debug("import_authorized", actor=actor)
