"""Decoding of MessagePack bytes into precisely typed entries."""

from __future__ import annotations

import io
import json
import struct
from typing import BinaryIO

from precisepack.types import BasicType, MsgPackEntry, MsgPackError, MsgPackValue, ValueKind

_CONSTANTS = {
    0xC0: MsgPackValue(ValueKind.NULL),
    0xC2: MsgPackValue(ValueKind.BOOL, False),
    0xC3: MsgPackValue(ValueKind.BOOL, True),
}

_NUMBERS = {
    0xCA: (ValueKind.F32, ">f"),
    0xCB: (ValueKind.F64, ">d"),
    0xCC: (ValueKind.U8, ">B"),
    0xCD: (ValueKind.U16, ">H"),
    0xCE: (ValueKind.U32, ">I"),
    0xCF: (ValueKind.U64, ">Q"),
    0xD0: (ValueKind.I8, ">b"),
    0xD1: (ValueKind.I16, ">h"),
    0xD2: (ValueKind.I32, ">i"),
    0xD3: (ValueKind.I64, ">q"),
}

_SIZED = {
    0xC4: (ValueKind.BIN8, ">B"),
    0xC5: (ValueKind.BIN16, ">H"),
    0xC6: (ValueKind.BIN32, ">I"),
    0xD9: (ValueKind.STR8, ">B"),
    0xDA: (ValueKind.STR16, ">H"),
    0xDB: (ValueKind.STR32, ">I"),
    0xDC: (ValueKind.ARRAY16, ">H"),
    0xDD: (ValueKind.ARRAY32, ">I"),
    0xDE: (ValueKind.MAP16, ">H"),
    0xDF: (ValueKind.MAP32, ">I"),
}

_EXTENSIONS = frozenset({0xC7, 0xC8, 0xC9, 0xD4, 0xD5, 0xD6, 0xD7, 0xD8})


def _read(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            raise MsgPackError("IO error: failed to fill whole buffer")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _read_uint(stream: BinaryIO, fmt: str) -> int:
    (number,) = struct.unpack(fmt, _read(stream, struct.calcsize(fmt)))
    return number


def _read_payload(stream: BinaryIO, kind: ValueKind, length: int) -> MsgPackValue:
    family = kind.basic_type
    if family is BasicType.STRING:
        raw = _read(stream, length)
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MsgPackError(f"Invalid UTF-8: {exc}") from exc
        return MsgPackValue(kind, text)
    if family is BasicType.BIN:
        return MsgPackValue(kind, _read(stream, length))
    if family is BasicType.ARRAY:
        return MsgPackValue(kind, [read_value(stream) for _ in range(length)])
    return MsgPackValue(
        kind, [(read_value(stream), read_value(stream)) for _ in range(length)]
    )


def _read_body(stream: BinaryIO, marker: int) -> MsgPackValue:
    if marker <= 0x7F:
        return MsgPackValue(ValueKind.FIX_POS, marker)
    if marker >= 0xE0:
        return MsgPackValue(ValueKind.FIX_NEG, marker - 0x100)
    if marker <= 0x8F:
        return _read_payload(stream, ValueKind.FIX_MAP, marker & 0x0F)
    if marker <= 0x9F:
        return _read_payload(stream, ValueKind.FIX_ARRAY, marker & 0x0F)
    if marker <= 0xBF:
        return _read_payload(stream, ValueKind.FIX_STR, marker & 0x1F)
    if marker in _CONSTANTS:
        return _CONSTANTS[marker]
    if marker in _NUMBERS:
        kind, fmt = _NUMBERS[marker]
        (number,) = struct.unpack(fmt, _read(stream, struct.calcsize(fmt)))
        return MsgPackValue(kind, number)
    if marker in _SIZED:
        kind, fmt = _SIZED[marker]
        return _read_payload(stream, kind, _read_uint(stream, fmt))
    if marker in _EXTENSIONS:
        raise MsgPackError(f"extension types are not supported (marker {marker:#04x})")
    raise MsgPackError(f"reserved marker {marker:#04x}")


def read_value(stream: BinaryIO) -> MsgPackEntry:
    """Read one complete value, collections included, from a binary stream."""
    marker = _read(stream, 1)[0]
    return MsgPackEntry(marker, _read_body(stream, marker))


def unpack(data: bytes) -> MsgPackEntry:
    """Decode the first value in ``data``; any trailing bytes are ignored."""
    return read_value(io.BytesIO(data))


def unpack_json(data: bytes, pretty: bool | None = False) -> str:
    """Decode ``data`` and return the entry as a JSON string."""
    entry = unpack(data)
    if pretty:
        return json.dumps(entry.to_dict(), ensure_ascii=False, allow_nan=False, indent=2)
    return json.dumps(
        entry.to_dict(), ensure_ascii=False, allow_nan=False, separators=(",", ":")
    )