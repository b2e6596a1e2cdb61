"""Small shared value types."""

from __future__ import annotations

from enum import Enum


class DagRunType(str, Enum):
    """All DAG run types."""

    BACKFILL = "backfill"
    SCHEDULED = "scheduled"
    MANUAL = "manual"
    ASSET_TRIGGERED = "asset_triggered"

    def __str__(self) -> str:
        return self.value


class SecretString:
    """A string whose content is hidden from repr and str."""

    __slots__ = ("_secret",)

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def secret(self) -> str:
        """Return the hidden value."""
        return self._secret

    def __repr__(self) -> str:
        return "SecretString(***)"

    def __str__(self) -> str:
        return "***"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretString):
            return NotImplemented
        return self._secret == other._secret

    def __hash__(self) -> int:
        return hash(self._secret)