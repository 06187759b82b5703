"""Encoding of precisely typed entries back into MessagePack bytes."""

from __future__ import annotations

import json
import struct
from collections.abc import Iterator
from typing import BinaryIO

from precisepack.types import BasicType, MsgPackEntry, MsgPackError, MsgPackValue, ValueKind

_NUMBERS = {
    ValueKind.U8: (0xCC, ">B"),
    ValueKind.U16: (0xCD, ">H"),
    ValueKind.U32: (0xCE, ">I"),
    ValueKind.U64: (0xCF, ">Q"),
    ValueKind.I8: (0xD0, ">b"),
    ValueKind.I16: (0xD1, ">h"),
    ValueKind.I32: (0xD2, ">i"),
    ValueKind.I64: (0xD3, ">q"),
    ValueKind.F32: (0xCA, ">f"),
    ValueKind.F64: (0xCB, ">d"),
}

_SIZED = {
    ValueKind.STR8: (0xD9, ">B"),
    ValueKind.STR16: (0xDA, ">H"),
    ValueKind.STR32: (0xDB, ">I"),
    ValueKind.BIN8: (0xC4, ">B"),
    ValueKind.BIN16: (0xC5, ">H"),
    ValueKind.BIN32: (0xC6, ">I"),
    ValueKind.ARRAY16: (0xDC, ">H"),
    ValueKind.ARRAY32: (0xDD, ">I"),
    ValueKind.MAP16: (0xDE, ">H"),
    ValueKind.MAP32: (0xDF, ">I"),
}

# Prefix bits and length mask of the formats that carry their length in the marker.
_FIXED = {
    ValueKind.FIX_STR: (0xA0, 0x1F),
    ValueKind.FIX_ARRAY: (0x90, 0x0F),
    ValueKind.FIX_MAP: (0x80, 0x0F),
}


def _value_of(value: MsgPackEntry | MsgPackValue) -> MsgPackValue:
    if isinstance(value, MsgPackEntry):
        return value.data
    if isinstance(value, MsgPackValue):
        return value
    raise TypeError(f"expected MsgPackEntry or MsgPackValue, got {type(value).__name__}")


def _header(kind: ValueKind, count: int) -> bytes:
    if kind in _FIXED:
        prefix, mask = _FIXED[kind]
        return bytes([count & mask | prefix])
    marker, fmt = _SIZED[kind]
    # Lengths that do not fit the field are truncated, keeping the chosen format.
    mask = (1 << (8 * struct.calcsize(fmt))) - 1
    return bytes([marker]) + struct.pack(fmt, count & mask)


def _chunks(value: MsgPackValue) -> Iterator[bytes]:
    kind = value.kind
    if kind is ValueKind.NULL:
        yield b"\xc0"
    elif kind is ValueKind.BOOL:
        yield b"\xc3" if value.value else b"\xc2"
    elif kind is ValueKind.FIX_POS:
        yield bytes([value.value & 0x7F])
    elif kind is ValueKind.FIX_NEG:
        yield bytes([value.value & 0x1F | 0xE0])
    elif kind in _NUMBERS:
        marker, fmt = _NUMBERS[kind]
        yield bytes([marker]) + struct.pack(fmt, value.value)
    else:
        family = kind.basic_type
        if family is BasicType.STRING:
            body = value.value.encode("utf-8")
            yield _header(kind, len(body))
            yield body
        elif family is BasicType.BIN:
            yield _header(kind, len(value.value))
            yield value.value
        elif family is BasicType.ARRAY:
            yield _header(kind, len(value.value))
            for item in value.value:
                yield from _chunks(item.data)
        else:
            yield _header(kind, len(value.value))
            for key, item in value.value:
                yield from _chunks(key.data)
                yield from _chunks(item.data)


def write_value(writer: BinaryIO, value: MsgPackEntry | MsgPackValue) -> None:
    """Write the encoding of an entry or value to a binary writer."""
    for chunk in _chunks(_value_of(value)):
        writer.write(chunk)


def pack(entry: MsgPackEntry | MsgPackValue) -> bytes:
    """Encode an entry (or a bare value) into MessagePack bytes."""
    return b"".join(_chunks(_value_of(entry)))


def pack_json(json_text: str) -> bytes:
    """Encode the JSON form of an entry into MessagePack bytes."""
    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise MsgPackError(f"invalid JSON: {exc}") from exc
    return pack(MsgPackEntry.from_dict(parsed))