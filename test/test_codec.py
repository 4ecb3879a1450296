from dataclasses import replace

import pytest

from scui.core.codec import (
    ZERO_ADDRESS,
    decode,
    encode,
    results_as_list,
    serializes_as_text,
    unpack_results,
    zero_value,
)
from scui.core.schema import Argument, TypeDescriptor
from scui.utils.exceptions import ValueCodecError

ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


def t(type_str, components=None):
    return TypeDescriptor.parse(type_str, components)


PAIR = t("tuple", [{"name": "label", "type": "string"}, {"name": "amount", "type": "uint256"}])


@pytest.mark.parametrize("type_str", ["string", "address", "bytes", "bytes32"])
def test_textual_shapes_are_quoted(type_str):
    assert serializes_as_text(t(type_str))


@pytest.mark.parametrize("type_str", ["uint256", "int8", "bool", "uint256[]", "string[2]"])
def test_structured_shapes_are_parsed_bare(type_str):
    assert not serializes_as_text(t(type_str))


def test_same_text_depends_on_target_shape():
    assert encode("42", t("string")) == "42"
    assert encode("42", t("uint256")) == 42


def test_quoted_text_stays_literal_for_strings():
    assert encode('"hi"', t("string")) == '"hi"'
    with pytest.raises(ValueCodecError):
        encode('"42"', t("bool"))


def test_encode_integers():
    assert encode("-5", t("int256")) == -5
    assert encode("255", t("uint8")) == 255
    with pytest.raises(ValueCodecError):
        encode("256", t("uint8"))
    with pytest.raises(ValueCodecError):
        encode("-1", t("uint256"))
    with pytest.raises(ValueCodecError):
        encode("true", t("uint256"))
    with pytest.raises(ValueCodecError):
        encode("ten", t("uint256"))


def test_encode_address_is_checksummed():
    assert encode(ADDRESS.lower(), t("address")) == ADDRESS
    assert encode(ADDRESS[2:].lower(), t("address")) == ADDRESS
    with pytest.raises(ValueCodecError):
        encode("0x1234", t("address"))


def test_encode_bytes():
    assert encode("0x0102", t("bytes")) == b"\x01\x02"
    assert encode("", t("bytes")) == b""
    assert encode("0x01", t("bytes4")) == b"\x01\x00\x00\x00"
    with pytest.raises(ValueCodecError):
        encode("0x010203", t("bytes2"))
    with pytest.raises(ValueCodecError):
        encode("0x123", t("bytes"))
    with pytest.raises(ValueCodecError):
        encode("hello", t("bytes"))


def test_encode_arrays():
    assert encode("[1, 2, 3]", t("uint256[]")) == [1, 2, 3]
    assert encode('["a", "b"]', t("string[2]")) == ["a", "b"]
    assert encode(f'["{ADDRESS.lower()}"]', t("address[]")) == [ADDRESS]
    assert encode("[[1], [2, 3]]", t("uint8[][]")) == [[1], [2, 3]]
    with pytest.raises(ValueCodecError):
        encode("[1]", t("uint256[2]"))
    with pytest.raises(ValueCodecError):
        encode("1", t("uint256[]"))


def test_encode_tuples_from_list_or_object():
    assert encode('["x", 7]', PAIR) == ("x", 7)
    assert encode('{"amount": 7, "label": "x"}', PAIR) == ("x", 7)
    with pytest.raises(ValueCodecError):
        encode('{"label": "x"}', PAIR)
    with pytest.raises(ValueCodecError):
        encode('["x"]', PAIR)


def test_malformed_json_is_a_codec_error():
    with pytest.raises(ValueCodecError) as e:
        encode("[1, 2", t("uint256[]"))
    assert "uint256[]" in e.value.message


def test_optional_shape_accepts_null():
    optional = replace(t("uint256"), optional=True)
    assert encode("null", optional) is None
    assert encode("3", optional) == 3
    with pytest.raises(ValueCodecError):
        encode("null", t("uint256"))


def test_zero_values():
    assert zero_value(t("uint256")) == 0
    assert zero_value(t("address")) == ZERO_ADDRESS
    assert zero_value(t("bytes3")) == b"\x00\x00\x00"
    assert zero_value(t("bool[2]")) == [False, False]
    assert zero_value(PAIR) == ("", 0)


def test_decode_renders_text_bare_and_the_rest_as_compact_json():
    assert decode("hello", t("string")) == "hello"
    assert decode(ADDRESS, t("address")) == ADDRESS
    assert decode(42, t("uint256")) == "42"
    assert decode(True, t("bool")) == "true"
    assert decode(b"\xde\xad", t("bytes")) == "0xdead"
    assert decode([1, 2], t("uint256[]")) == "[1,2]"
    assert decode(("x", 7), PAIR) == '["x",7]'


@pytest.mark.parametrize("value,type_str", [
    ("42", "string"),
    (ADDRESS, "address"),
    (b"\x00\x01", "bytes"),
    (b"\x01" * 32, "bytes32"),
    (-17, "int64"),
    (False, "bool"),
    ([ADDRESS, ADDRESS], "address[2]"),
])
def test_decode_then_encode_reproduces_value(value, type_str):
    assert encode(decode(value, t(type_str)), t(type_str)) == value


def test_decoded_tuple_round_trips():
    assert encode(decode(("x", 7), PAIR), PAIR) == ("x", 7)


def test_unpack_results_by_output_count():
    one = (Argument("", t("uint256")),)
    two = (Argument("a", t("uint256")), Argument("b", t("bool")))
    assert unpack_results((), None) == []
    assert unpack_results(one, 5) == 5
    assert unpack_results(two, (5, True)) == [5, True]
    assert results_as_list(one, 5) == [5]
    assert results_as_list(two, [5, True]) == [5, True]
