# precisepack

MessagePack encoding and decoding that keeps the exact format of every value.

Most MessagePack libraries turn `0xCD 0x00 0x01` (a 16-bit unsigned integer) into a
plain `1` and write it back as `0x01`. `precisepack` keeps the precise kind of each
value: whether an integer was a fixint, `uint16` or `int64`, whether a string was a
fixstr or `str32`, whether an array used the fixed, 16-bit or 32-bit header. Decoding
a well-formed value and then encoding it gives back the same bytes.

The package has no dependencies beyond the standard library and supports Python 3.10
and later.

## Installation

```
pip install precisepack
```

## Modules

- `precisepack.types`: `MsgPackEntry`, `MsgPackValue`, `ValueKind`, `BasicType` and
  `MsgPackError`.
- `precisepack.decode`: `unpack`, `unpack_json` and `read_value`.
- `precisepack.encode`: `pack`, `pack_json` and `write_value`.

## Decoding

```python
from precisepack.decode import unpack

entry = unpack(b"\xc3")
entry.raw_marker    # 195
entry.basic_type    # BasicType.BOOL
entry.data          # MsgPackValue(kind=ValueKind.BOOL, value=True)
```

Each decoded value is a `MsgPackEntry` with:

- `raw_marker`: the marker byte exactly as read,
- `basic_type`: a coarse `BasicType` (`NULL`, `BOOL`, `NUMBER`, `STRING`, `BIN`,
  `ARRAY`, `MAP`),
- `data`: a `MsgPackValue` holding the precise `ValueKind` (`kind`) and its `value`.

Values are held as `None`, `bool`, `int`, `float`, `str` or `bytes`. Arrays hold
tuples of entries; maps hold tuples of `(key, value)` entry pairs in the order they
were read, so duplicate or non-string keys are kept.

`unpack` decodes the first value in its input and ignores any bytes after it.
`read_value(stream)` reads one value from a binary stream, which is useful when
several values follow one another.

Malformed input raises `MsgPackError`: truncated data, invalid UTF-8 in a string,
the reserved marker `0xC1`, and extension types, which are not supported.

## Building values

`MsgPackValue(kind, value)` checks its value when it is created and raises
`MsgPackError` if it does not suit the kind: an integer out of range for `U8`, `I16`
and so on, a non-string for `Str8`, elements that are not `MsgPackEntry` objects in
an array. `F32` values are rounded to single precision.

```python
from precisepack.types import MsgPackEntry, MsgPackValue, ValueKind

number = MsgPackEntry(0xCD, MsgPackValue(ValueKind.U16, 1))
pair = MsgPackEntry(
    0x81,
    MsgPackValue(
        ValueKind.FIX_MAP,
        [(MsgPackEntry(0xA1, MsgPackValue(ValueKind.FIX_STR, "a")), number)],
    ),
)
```

## Encoding

```python
from precisepack.encode import pack, write_value

pack(number)    # b'\xcd\x00\x01'
```

`pack` and `write_value(writer, value)` accept an entry or a bare `MsgPackValue`;
`write_value` writes to any binary writer with a `write` method. Anything else raises
`TypeError`.

The encoder writes each value in the format its kind names, so a `U16` value is
always written as `0xCD` followed by two bytes, whatever its size. The entry's
`raw_marker` is not consulted. Lengths that do not fit the chosen format's length
field are truncated rather than promoted to a larger format.

## JSON form

`unpack_json` gives the compact JSON form of a decoded entry:

```python
from precisepack.decode import unpack_json

unpack_json(b"\xc3")
# '{"raw_marker":195,"basic_type":"Bool","data":{"type":"Bool","value":true}}'
```

Pass `pretty=True` for output indented by two spaces. Binary data appears as a list
of byte values, maps as lists of `[key, value]` pairs, and infinite or NaN floats as
`null`.

`pack_json` takes the same JSON form back to bytes, raising `MsgPackError` for
invalid JSON or a malformed entry:

```python
from precisepack.encode import pack_json

pack_json('{"raw_marker": 195, "basic_type": "Bool", "data": {"type": "Bool", "value": true}}')
# b'\xc3'
```

`MsgPackEntry.to_dict()` and `MsgPackEntry.from_dict()` (and the same methods on
`MsgPackValue`) move between entries and plain dictionaries of the same shape.

## What it does not do

- Extension types (`fixext`, `ext8/16/32`, timestamps) can be neither decoded nor
  encoded.
- There is no conversion to or from ordinary Python objects such as `dict` and
  `list`; values are always wrapped in `MsgPackEntry` and `MsgPackValue`.
- There is no command-line tool; the package is a library only.