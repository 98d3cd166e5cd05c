"""Signed, time-limited access tokens for the recommendation endpoint."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import jwt
from jwt import InvalidTokenError

from placefinder.errors import Unauthorized

LOGGER = logging.getLogger(__name__)

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
DEFAULT_TTL = 24 * 60 * 60
BEARER_PREFIX = "Bearer "


@dataclass(frozen=True, slots=True)
class TokenClaims:
    subject: str
    is_admin: bool
    expires_at: int


class TokenService:
    """Issues and verifies HMAC-signed JWTs.

    Tokens are never stored: validity depends only on the signature, the
    signing algorithm and the ``exp`` claim compared against ``clock()``.
    """

    def __init__(
        self,
        secret: str,
        *,
        ttl: int = DEFAULT_TTL,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ) -> None:
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"Unsupported signing algorithm: {algorithm}")
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self.ttl = ttl
        self.algorithm = algorithm
        self.clock = clock

    def issue(self, subject: str) -> str:
        claims = {
            "name": subject,
            "admin": False,
            "exp": int(self.clock()) + self.ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") != self.algorithm:
                raise Unauthorized("Invalid token")
            # Expiry is checked below against the injected clock.
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"], "verify_exp": False},
            )
        except InvalidTokenError as exc:
            LOGGER.info("Rejected token: %s", exc)
            raise Unauthorized("Invalid token") from exc

        try:
            expires_at = int(payload["exp"])
        except (TypeError, ValueError) as exc:
            raise Unauthorized("Invalid token") from exc
        if expires_at <= self.clock():
            LOGGER.info("Rejected expired token for %r", payload.get("name"))
            raise Unauthorized("Token expired")

        return TokenClaims(
            subject=str(payload.get("name", "")),
            is_admin=bool(payload.get("admin", False)),
            expires_at=expires_at,
        )

    def verify_header(self, header: str | None) -> TokenClaims:
        """Verify an ``Authorization`` header value of the form ``Bearer <token>``."""
        if not header:
            raise Unauthorized("Authorization token missing")
        if not header.startswith(BEARER_PREFIX):
            raise Unauthorized("Invalid authorization token format")
        token = header[len(BEARER_PREFIX) :].strip()
        if not token:
            raise Unauthorized("Invalid authorization token format")
        return self.verify(token)
