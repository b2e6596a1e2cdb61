"""Map index of a task instance, where -1 means the task is not mapped."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import total_ordering


class MapIndexConversionError(ValueError):
    """Raised when an integer cannot be used as a map index."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(
            f"Invalid map index {value} - must be -1 or a non-negative integer"
        )


@total_ordering
@dataclass(frozen=True)
class MapIndex:
    """A map index: ``None`` for an unmapped task, otherwise a non-negative integer."""

    index: int | None = None

    def __post_init__(self) -> None:
        if self.index is not None and (
            not isinstance(self.index, int)
            or isinstance(self.index, bool)
            or self.index < 0
        ):
            raise MapIndexConversionError(self.index)

    @classmethod
    def some(cls, index: int) -> MapIndex:
        """A map index for a mapped task."""
        return cls(index)

    @classmethod
    def none(cls) -> MapIndex:
        """The map index of an unmapped task."""
        return cls(None)

    @classmethod
    def from_int(cls, value: int) -> MapIndex:
        """Convert the integer form, where -1 means unmapped."""
        if value == -1:
            return cls(None)
        if value >= 0:
            return cls(value)
        raise MapIndexConversionError(value)

    def to_int(self) -> int:
        """Return the integer form, -1 for an unmapped task."""
        return -1 if self.index is None else self.index

    def to_json(self) -> str:
        """Encode as a JSON number."""
        return json.dumps(self.to_int())

    @classmethod
    def from_json(cls, text: str) -> MapIndex:
        """Decode from a JSON number."""
        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid map index: {text}") from exc
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Invalid map index: {text}")
        return cls.from_int(value)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, MapIndex):
            return NotImplemented
        return self.to_int() < other.to_int()

    def __str__(self) -> str:
        return str(self.to_int())