"""
Signed, time-limited identity tokens.

Tokens are HS256 JWTs carrying the owner id in ``sub`` plus ``iat``/``exp``.
They are never stored; every request is verified by signature and expiry.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

import jwt

from .errors import InvalidToken

ALGORITHM = "HS256"


class TokenService:
    """Issues and verifies bearer tokens with a process-wide signing key."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 3600,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._secret = secret
        self._ttl = ttl_seconds
        self._clock = clock or time.time

    def issue(self, owner_id: str) -> str:
        """Create a signed token for ``owner_id`` expiring ``ttl_seconds`` from now."""
        now = int(self._clock())
        payload = {"sub": owner_id, "iat": now, "exp": now + self._ttl}
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> str:
        """
        Verify token and return the owner id.

        Raises ``InvalidToken`` on bad signatures, malformed or expired tokens.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp"], "verify_exp": False},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken(str(exc)) from exc

        # Expiry is checked here so it follows the injected clock.
        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= self._clock():
            raise InvalidToken("token expired")

        owner_id = payload.get("sub")
        if not isinstance(owner_id, str) or not owner_id:
            raise InvalidToken("token subject missing")
        return owner_id
