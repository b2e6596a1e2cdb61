"""JSON encoding and decoding of the package's data types."""

from __future__ import annotations

import json
import re
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from .map_index import MapIndex
from .types import SecretString


class JsonSerdeError(ValueError):
    """Raised when a value cannot be encoded to or decoded from JSON."""


_DATETIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))"
)


def _parse_datetime(text: Any) -> datetime:
    """Parse an RFC 3339 timestamp into a UTC datetime."""
    if not isinstance(text, str):
        raise JsonSerdeError(f"invalid datetime: {text!r}")
    match = _DATETIME_RE.fullmatch(text)
    if match is None:
        raise JsonSerdeError(f"invalid datetime: {text!r}")
    year, month, day, hour, minute, second = (int(g) for g in match.group(1, 2, 3, 4, 5, 6))
    fraction = match.group(7) or ""
    microsecond = int((fraction + "000000")[:6])
    if match.group(8):
        tz = timezone.utc
    else:
        sign = 1 if match.group(9) == "+" else -1
        offset = timedelta(hours=int(match.group(10)), minutes=int(match.group(11)))
        tz = timezone(sign * offset)
    try:
        value = datetime(year, month, day, hour, minute, second, microsecond, tzinfo=tz)
        return value.astimezone(timezone.utc)
    except (ValueError, OverflowError) as exc:
        raise JsonSerdeError(f"invalid datetime: {text!r}") from exc


def _format_datetime(value: datetime) -> str:
    """Format a timezone-aware datetime as an RFC 3339 UTC timestamp."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise JsonSerdeError("cannot encode a naive datetime")
    utc = value.astimezone(timezone.utc)
    base = utc.replace(tzinfo=None).isoformat(timespec="seconds")
    micro = utc.microsecond
    if micro == 0:
        fraction = ""
    elif micro % 1000 == 0:
        fraction = f".{micro // 1000:03d}"
    else:
        fraction = f".{micro:06d}"
    return f"{base}{fraction}Z"


def _require_mapping(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise JsonSerdeError(f"invalid type for {what}: expected an object")
    return data


def _field(data: dict, key: str, kind: type, *, optional: bool = False) -> Any:
    value = data.get(key)
    if value is None:
        if optional:
            return None
        raise JsonSerdeError(f"missing field `{key}`")
    if kind is int and isinstance(value, bool):
        raise JsonSerdeError(f"invalid type for field `{key}`")
    if not isinstance(value, kind):
        raise JsonSerdeError(f"invalid type for field `{key}`")
    return value


def _unsigned(data: dict, key: str) -> int:
    value = _field(data, key, int)
    if value < 0:
        raise JsonSerdeError(f"invalid value for field `{key}`: {value}")
    return value


def _map_index_field(data: dict, key: str) -> MapIndex:
    value = _field(data, key, int)
    try:
        return MapIndex.from_int(value)
    except ValueError as exc:
        raise JsonSerdeError(f"Invalid map index: {value}") from exc


def _enum_field(data: dict, key: str, enum_cls: type[Enum]) -> Any:
    value = _field(data, key, str)
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise JsonSerdeError(f"unknown variant `{value}` for field `{key}`") from exc


def _str_list_field(data: dict, key: str, *, optional: bool = False) -> list[str] | None:
    value = _field(data, key, list, optional=optional)
    if value is None:
        return None
    if not all(isinstance(item, str) for item in value):
        raise JsonSerdeError(f"invalid type for field `{key}`")
    return list(value)


def _to_plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, MapIndex):
        return value.to_int()
    if isinstance(value, SecretString):
        return value.secret()
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, UUID):
        return str(value)
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, dict):
        if not all(isinstance(k, str) for k in value):
            raise JsonSerdeError("object keys must be strings")
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return _to_plain(to_dict())
    raise JsonSerdeError(f"cannot encode value of type {type(value).__name__}")


def _from_plain(data: Any, cls: type) -> Any:
    if isinstance(cls, type) and issubclass(cls, Enum):
        return cls(data)
    if cls is MapIndex:
        if not isinstance(data, int) or isinstance(data, bool):
            raise JsonSerdeError(f"Invalid map index: {data!r}")
        return MapIndex.from_int(data)
    if cls is SecretString:
        if not isinstance(data, str):
            raise JsonSerdeError("expected a string")
        return SecretString(data)
    if cls is datetime:
        return _parse_datetime(data)
    if cls is UUID:
        if not isinstance(data, str):
            raise JsonSerdeError("expected a UUID string")
        return UUID(data)
    from_dict = getattr(cls, "from_dict", None)
    if callable(from_dict):
        return from_dict(data)
    if cls is bool:
        if not isinstance(data, bool):
            raise JsonSerdeError("expected a boolean")
        return data
    if cls is int:
        if not isinstance(data, int) or isinstance(data, bool):
            raise JsonSerdeError("expected an integer")
        return data
    if cls is float:
        if not isinstance(data, (int, float)) or isinstance(data, bool):
            raise JsonSerdeError("expected a number")
        return float(data)
    if cls in (str, list, dict):
        if not isinstance(data, cls):
            raise JsonSerdeError(f"expected a {cls.__name__}")
        return data
    raise JsonSerdeError(f"cannot decode into {cls!r}")


def dumps(value: Any) -> str:
    """Encode ``value`` as a compact JSON string."""
    plain = _to_plain(value)
    try:
        return json.dumps(plain, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except ValueError as exc:
        raise JsonSerdeError(str(exc)) from exc


def loads(text: str, cls: type) -> Any:
    """Decode a JSON string into an instance of ``cls``."""
    try:
        data = json.loads(text)
    except (ValueError, TypeError) as exc:
        raise JsonSerdeError(str(exc)) from exc
    try:
        return _from_plain(data, cls)
    except JsonSerdeError:
        raise
    except (ValueError, TypeError, KeyError) as exc:
        raise JsonSerdeError(str(exc)) from exc


def serialize(value: Any) -> Any:
    """Turn ``value`` into a structure made only of JSON types."""
    return json.loads(dumps(value))


def deserialize(value: Any, cls: type) -> Any:
    """Build an instance of ``cls`` from a structure made only of JSON types."""
    return loads(dumps(value), cls)