"""Generation of tokens that authorise API calls."""

from __future__ import annotations

from abc import ABC, abstractmethod


class JWTGenerator(ABC):
    """Produces an authorisation token for a given API method path."""

    @abstractmethod
    def generate(self, method: str) -> str:
        """Return a token for ``method``."""


class MockJWTGenerator(JWTGenerator):
    """Generates tokens of the form ``<method>:<secret>`` for testing."""

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def generate(self, method: str) -> str:
        return f"{method}:{self._secret}"

    def __repr__(self) -> str:
        return "MockJWTGenerator(***)"