"""Conversion between typed setting values and their stored string form.

Writes are explicit: every caller value is classified into one of three
variants (``StringValue``, ``BoolValue``, ``JsonValue``) which knows how to
encode itself. Reads are not: the stored column carries no type tag, so
:func:`decode` sniffs the string and returns whatever JSON it parses to. That
sniffing is kept for compatibility with existing rows and lives only in
:func:`_sniff_json`. A boolean stored as ``"1"`` therefore reads back as the
integer ``1``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

_TRUTHY = {"1", "true", "on", "yes"}


@dataclass(frozen=True)
class StringValue:
    """Plain scalar stored as-is (``None`` stays ``None``)."""

    raw: Optional[str]

    def encode(self) -> Optional[str]:
        return self.raw


@dataclass(frozen=True)
class BoolValue:
    """Flag stored as ``"1"`` or ``"0"``."""

    flag: bool

    def encode(self) -> str:
        return "1" if self.flag else "0"


@dataclass(frozen=True)
class JsonValue:
    """Structured data stored as compact JSON."""

    data: Any

    def encode(self) -> str:
        return json.dumps(self.data, separators=(",", ":"), ensure_ascii=False)


SettingValue = Union[StringValue, BoolValue, JsonValue]


def classify(value: Any) -> SettingValue:
    """Map a caller-supplied value onto its storage variant."""

    if isinstance(value, (StringValue, BoolValue, JsonValue)):
        return value
    if isinstance(value, bool):
        return BoolValue(value)
    if isinstance(value, (list, tuple, dict)):
        return JsonValue(list(value) if isinstance(value, tuple) else value)
    if value is None or isinstance(value, str):
        return StringValue(value)
    if isinstance(value, (int, float)):
        # numbers land in a text column as their textual form
        return StringValue(json.dumps(value))
    raise TypeError(f"Unsupported setting value type: {type(value).__name__}")


def encode(value: Any) -> Optional[str]:
    """Return the string persisted for ``value``."""

    return classify(value).encode()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


_MISSING = object()


def _sniff_json(stored: str) -> Any:
    """Parse ``stored`` as strict JSON, or return ``_MISSING``."""

    try:
        return json.loads(stored, parse_constant=_reject_constant)
    except ValueError:
        return _MISSING


def decode(stored: Any) -> Any:
    """Return the application value for a stored column value.

    Strings that parse as JSON come back decoded (``"123"`` -> ``123``,
    ``"true"`` -> ``True``, ``'["a"]'`` -> ``["a"]``); anything else is
    returned unchanged.
    """

    if not isinstance(stored, str):
        return stored
    decoded = _sniff_json(stored)
    return stored if decoded is _MISSING else decoded


def sniff(stored: Optional[str]) -> SettingValue:
    """Tag a stored string the way :func:`decode` would interpret it."""

    if stored is None:
        return StringValue(None)
    decoded = _sniff_json(stored)
    if decoded is _MISSING:
        return StringValue(stored)
    return JsonValue(decoded)


def coerce_checkbox(value: Any) -> bool:
    """Interpret form input for a checkbox field."""

    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False


def is_boolean_like(value: Any) -> bool:
    """True for values bulk admin updates treat as checkbox input."""

    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value in {"true", "false", "1", "0"}


__all__ = [
    "BoolValue",
    "JsonValue",
    "SettingValue",
    "StringValue",
    "classify",
    "coerce_checkbox",
    "decode",
    "encode",
    "is_boolean_like",
    "sniff",
]
