import io

import pytest

from precisepack.decode import unpack, unpack_json
from precisepack.encode import pack, pack_json, write_value
from precisepack.types import MsgPackEntry, MsgPackError, MsgPackValue, ValueKind

DOC_JSON = r"""
{
    "raw_marker": 195,
    "basic_type": "Bool",
    "data": {
        "type": "Bool",
        "value": true
    }
}
"""

SAMPLES = [
    b"\xc0",
    b"\xc2",
    b"\xc3",
    b"\x00",
    b"\x7f",
    b"\xe0",
    b"\xff",
    b"\xcc\x80",
    b"\xcd\x12\x34",
    b"\xce\x00\x00\x00\x01",
    b"\xcf" + bytes(8),
    b"\xd0\x80",
    b"\xd1\xff\xfe",
    b"\xd2" + bytes(4),
    b"\xd3" + b"\xff" * 8,
    b"\xca\x3f\x80\x00\x00",
    b"\xcb\x3f\xf8" + bytes(6),
    b"\xa0",
    b"\xa3abc",
    b"\xd9\x01a",
    b"\xda\x00\x01a",
    b"\xdb\x00\x00\x00\x01a",
    b"\xc4\x00",
    b"\xc5\x00\x02\x01\x02",
    b"\xc6\x00\x00\x00\x01\xff",
    b"\x90",
    b"\x93\x01\xa1x\xc3",
    b"\xdc\x00\x01\xc0",
    b"\xdd\x00\x00\x00\x00",
    b"\x80",
    b"\x82\x01\x02\xa1k\x90",
    b"\xde\x00\x01\x01\xc0",
    b"\xdf\x00\x00\x00\x00",
]


def test_pack_doc_example():
    entry = MsgPackEntry(195, MsgPackValue(ValueKind.BOOL, True))
    assert pack(entry) == bytes([0xC3])


def test_pack_json_doc_example():
    assert pack_json(DOC_JSON) == bytes([0xC3])


def test_write_value_doc_example():
    buffer = io.BytesIO()
    write_value(buffer, MsgPackValue(ValueKind.BOOL, True))
    assert buffer.getvalue() == bytes([0xC3])


def test_write_value_appends():
    buffer = io.BytesIO()
    first = MsgPackEntry(0xC0, MsgPackValue(ValueKind.NULL))
    second = MsgPackValue(ValueKind.FIX_STR, "ok")
    write_value(buffer, first)
    write_value(buffer, second)
    assert buffer.getvalue() == pack(first) + pack(second)


def test_write_value_rejects_other_types():
    with pytest.raises(TypeError):
        write_value(io.BytesIO(), 5)


@pytest.mark.parametrize("data", SAMPLES + [b"\xca\x7f\xc0\x00\x00"])
def test_binary_round_trip(data):
    assert pack(unpack(data)) == data


@pytest.mark.parametrize("data", SAMPLES)
def test_json_round_trip(data):
    assert pack_json(unpack_json(data)) == data
    assert pack_json(unpack_json(data, True)) == data


def test_fix_neg_encoding():
    assert pack(MsgPackValue(ValueKind.FIX_NEG, -32)) == b"\xe0"


def test_wide_format_is_kept_for_small_value():
    value = MsgPackValue(ValueKind.U16, 1)
    out = pack(value)
    assert out[0] == 0xCD
    assert len(out) == 3
    assert unpack(out).data == value


def test_fix_str_length_is_masked():
    out = pack(MsgPackValue(ValueKind.FIX_STR, "x" * 33))
    assert out[0] & 0xE0 == 0xA0
    assert out[1:] == b"x" * 33
    assert unpack(out).data.value == "x"


def test_str8_length_is_truncated():
    out = pack(MsgPackValue(ValueKind.STR8, "y" * 256))
    assert out[:2] == b"\xd9\x00"
    assert len(out) == 258


def test_pack_json_f32_matches_rounding():
    text = '{"raw_marker":202,"basic_type":"Number","data":{"type":"F32","value":0.1}}'
    assert unpack(pack_json(text)).data == MsgPackValue(ValueKind.F32, 0.1)


def test_pack_json_ignores_basic_type_mismatch():
    text = '{"raw_marker":0,"basic_type":"Null","data":{"type":"Bool","value":true}}'
    assert pack_json(text) == bytes([0xC3])


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        '{"raw_marker":195}',
        '{"raw_marker":195,"basic_type":"Bool","data":{"type":"Bool","value":"yes"}}',
        '{"raw_marker":204,"basic_type":"Number","data":{"type":"U8","value":300}}',
    ],
)
def test_pack_json_errors(text):
    with pytest.raises(MsgPackError):
        pack_json(text)