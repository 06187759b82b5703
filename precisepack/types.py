"""Precisely typed MessagePack values that remember their exact wire format."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any


class MsgPackError(Exception):
    """Raised when MessagePack data or its JSON description is invalid."""


class BasicType(Enum):
    """Coarse family of a value, independent of its exact encoding."""

    NULL = "Null"
    BOOL = "Bool"
    NUMBER = "Number"
    STRING = "String"
    BIN = "Bin"
    ARRAY = "Array"
    MAP = "Map"


class ValueKind(Enum):
    """Exact MessagePack format a value is stored in."""

    NULL = "Null"
    BOOL = "Bool"
    FIX_POS = "FixPos"
    FIX_NEG = "FixNeg"
    U8 = "U8"
    U16 = "U16"
    U32 = "U32"
    U64 = "U64"
    I8 = "I8"
    I16 = "I16"
    I32 = "I32"
    I64 = "I64"
    F32 = "F32"
    F64 = "F64"
    FIX_STR = "FixStr"
    STR8 = "Str8"
    STR16 = "Str16"
    STR32 = "Str32"
    BIN8 = "Bin8"
    BIN16 = "Bin16"
    BIN32 = "Bin32"
    FIX_ARRAY = "FixArray"
    ARRAY16 = "Array16"
    ARRAY32 = "Array32"
    FIX_MAP = "FixMap"
    MAP16 = "Map16"
    MAP32 = "Map32"

    @property
    def basic_type(self) -> BasicType:
        """The coarse family this format belongs to."""
        return _BASIC_TYPES[self]


_INT_RANGES = {
    ValueKind.FIX_POS: (0, 0xFF),
    ValueKind.FIX_NEG: (-0x80, 0x7F),
    ValueKind.U8: (0, 0xFF),
    ValueKind.U16: (0, 0xFFFF),
    ValueKind.U32: (0, 0xFFFF_FFFF),
    ValueKind.U64: (0, 0xFFFF_FFFF_FFFF_FFFF),
    ValueKind.I8: (-0x80, 0x7F),
    ValueKind.I16: (-0x8000, 0x7FFF),
    ValueKind.I32: (-0x8000_0000, 0x7FFF_FFFF),
    ValueKind.I64: (-0x8000_0000_0000_0000, 0x7FFF_FFFF_FFFF_FFFF),
}

_BASIC_TYPES = {
    ValueKind.NULL: BasicType.NULL,
    ValueKind.BOOL: BasicType.BOOL,
    **{kind: BasicType.NUMBER for kind in _INT_RANGES},
    ValueKind.F32: BasicType.NUMBER,
    ValueKind.F64: BasicType.NUMBER,
    **{
        kind: BasicType.STRING
        for kind in (ValueKind.FIX_STR, ValueKind.STR8, ValueKind.STR16, ValueKind.STR32)
    },
    **{kind: BasicType.BIN for kind in (ValueKind.BIN8, ValueKind.BIN16, ValueKind.BIN32)},
    **{
        kind: BasicType.ARRAY
        for kind in (ValueKind.FIX_ARRAY, ValueKind.ARRAY16, ValueKind.ARRAY32)
    },
    **{kind: BasicType.MAP for kind in (ValueKind.FIX_MAP, ValueKind.MAP16, ValueKind.MAP32)},
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _checked(kind: ValueKind, value: Any) -> Any:
    """Validate ``value`` for ``kind`` and return its normalised form."""
    family = kind.basic_type
    if family is BasicType.NULL:
        if value is not None:
            raise MsgPackError("Null carries no value")
        return None
    if family is BasicType.BOOL:
        if not isinstance(value, bool):
            raise MsgPackError(f"Bool needs a bool, got {value!r}")
        return value
    if kind in _INT_RANGES:
        low, high = _INT_RANGES[kind]
        if not _is_int(value):
            raise MsgPackError(f"{kind.value} needs an integer, got {value!r}")
        if not low <= value <= high:
            raise MsgPackError(f"{value} is out of range for {kind.value}")
        return value
    if family is BasicType.NUMBER:
        if not (_is_int(value) or isinstance(value, float)):
            raise MsgPackError(f"{kind.value} needs a number, got {value!r}")
        value = float(value)
        if kind is ValueKind.F32:
            try:
                (value,) = struct.unpack(">f", struct.pack(">f", value))
            except OverflowError as exc:
                raise MsgPackError(f"{value} is out of range for F32") from exc
        return value
    if family is BasicType.STRING:
        if not isinstance(value, str):
            raise MsgPackError(f"{kind.value} needs a str, got {value!r}")
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise MsgPackError(f"Invalid UTF-8: {exc}") from exc
        return value
    if family is BasicType.BIN:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise MsgPackError(f"{kind.value} needs bytes, got {value!r}")
        return bytes(value)
    if family is BasicType.ARRAY:
        try:
            items = tuple(value)
        except TypeError as exc:
            raise MsgPackError(f"{kind.value} needs a sequence of entries") from exc
        if not all(isinstance(item, MsgPackEntry) for item in items):
            raise MsgPackError(f"{kind.value} elements must be MsgPackEntry objects")
        return items
    try:
        pairs = tuple(tuple(pair) for pair in value)
    except TypeError as exc:
        raise MsgPackError(f"{kind.value} needs a sequence of key/value pairs") from exc
    for pair in pairs:
        if len(pair) != 2 or not all(isinstance(part, MsgPackEntry) for part in pair):
            raise MsgPackError(f"{kind.value} items must be pairs of MsgPackEntry objects")
    return pairs


@dataclass(frozen=True)
class MsgPackValue:
    """A value together with the exact format it is encoded in."""

    kind: ValueKind
    value: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ValueKind):
            raise MsgPackError(f"unknown value kind {self.kind!r}")
        object.__setattr__(self, "value", _checked(self.kind, self.value))

    @property
    def basic_type(self) -> BasicType:
        """The coarse family of this value."""
        return self.kind.basic_type

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready ``{"type": ..., "value": ...}`` form."""
        if self.kind is ValueKind.NULL:
            return {"type": self.kind.value}
        family = self.basic_type
        if family is BasicType.BIN:
            plain: Any = list(self.value)
        elif family is BasicType.ARRAY:
            plain = [item.to_dict() for item in self.value]
        elif family is BasicType.MAP:
            plain = [[key.to_dict(), val.to_dict()] for key, val in self.value]
        elif isinstance(self.value, float) and not math.isfinite(self.value):
            plain = None
        else:
            plain = self.value
        return {"type": self.kind.value, "value": plain}

    @classmethod
    def from_dict(cls, data: Any) -> MsgPackValue:
        """Build a value from its ``to_dict`` form."""
        if not isinstance(data, dict):
            raise MsgPackError("value must be a JSON object")
        try:
            kind = ValueKind(data["type"])
        except KeyError as exc:
            raise MsgPackError("missing field 'type'") from exc
        except (ValueError, TypeError) as exc:
            raise MsgPackError(f"unknown value type {data['type']!r}") from exc
        if kind is ValueKind.NULL:
            return cls(kind, data.get("value"))
        if "value" not in data:
            raise MsgPackError("missing field 'value'")
        raw = data["value"]
        family = kind.basic_type
        if family is BasicType.BIN:
            if not isinstance(raw, list) or not all(
                _is_int(byte) and 0 <= byte <= 0xFF for byte in raw
            ):
                raise MsgPackError(f"{kind.value} needs a list of bytes")
            return cls(kind, bytes(raw))
        if family is BasicType.ARRAY:
            if not isinstance(raw, list):
                raise MsgPackError(f"{kind.value} needs a list")
            return cls(kind, [MsgPackEntry.from_dict(item) for item in raw])
        if family is BasicType.MAP:
            if not isinstance(raw, list):
                raise MsgPackError(f"{kind.value} needs a list")
            pairs = []
            for pair in raw:
                if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                    raise MsgPackError(f"{kind.value} items must be [key, value] pairs")
                key, val = pair
                pairs.append((MsgPackEntry.from_dict(key), MsgPackEntry.from_dict(val)))
            return cls(kind, pairs)
        return cls(kind, raw)


@dataclass(frozen=True)
class MsgPackEntry:
    """A decoded value along with the marker byte it was read from."""

    raw_marker: int
    data: MsgPackValue

    def __post_init__(self) -> None:
        if not _is_int(self.raw_marker) or not 0 <= self.raw_marker <= 0xFF:
            raise MsgPackError(f"raw marker must be a byte, got {self.raw_marker!r}")
        if not isinstance(self.data, MsgPackValue):
            raise MsgPackError("entry data must be a MsgPackValue")

    @property
    def basic_type(self) -> BasicType:
        """The coarse family of the entry's value."""
        return self.data.basic_type

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the entry."""
        return {
            "raw_marker": self.raw_marker,
            "basic_type": self.basic_type.value,
            "data": self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> MsgPackEntry:
        """Build an entry from its ``to_dict`` form."""
        if not isinstance(data, dict):
            raise MsgPackError("entry must be a JSON object")
        try:
            raw_marker = data["raw_marker"]
            basic = data["basic_type"]
            body = data["data"]
        except KeyError as exc:
            raise MsgPackError(f"missing field {exc.args[0]!r}") from exc
        try:
            BasicType(basic)
        except (ValueError, TypeError) as exc:
            raise MsgPackError(f"unknown basic type {basic!r}") from exc
        return cls(raw_marker, MsgPackValue.from_dict(body))