"""HS512-signed JSON Web Tokens for the edge API."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone

import jwt

from .auth import JWTGenerator
from .clock import TimeProvider
from .types import SecretString

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class JWTCreationError(Exception):
    """Raised when a token cannot be created."""


class HS512JWTGenerator(JWTGenerator):
    """Generates HS512-signed tokens carrying audience, issuer and method claims."""

    def __init__(
        self, key: SecretString | str, audience: str, time_provider: TimeProvider
    ) -> None:
        self._key = key if isinstance(key, SecretString) else SecretString(key)
        self._valid_for = 600
        self._time_provider = time_provider
        self._audience = audience
        self._issuer: str | None = None

    def with_valid_for(self, valid_for: int) -> HS512JWTGenerator:
        """Return a generator whose tokens are valid for ``valid_for`` seconds."""
        if valid_for < 0:
            raise ValueError("valid_for must not be negative")
        clone = copy.copy(self)
        clone._valid_for = valid_for
        return clone

    def with_issuer(self, issuer: str) -> HS512JWTGenerator:
        """Return a generator whose tokens carry ``issuer``."""
        clone = copy.copy(self)
        clone._issuer = issuer
        return clone

    def generate(self, method: str) -> str:
        now = self._time_provider.now()
        try:
            issued = (now - _EPOCH) // timedelta(seconds=1)
            payload = {
                "exp": issued + self._valid_for,
                "nbf": issued,
                "iat": issued,
                "aud": self._audience,
                "method": method,
            }
            if self._issuer is not None:
                payload["iss"] = self._issuer
            return jwt.encode(payload, self._key.secret(), algorithm="HS512")
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise JWTCreationError(str(exc)) from exc

    def __repr__(self) -> str:
        return (
            f"HS512JWTGenerator(key=***, audience={self._audience!r}, "
            f"issuer={self._issuer!r}, valid_for={self._valid_for})"
        )