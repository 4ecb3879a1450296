import json

import pytest

from conftest import TOKEN_ABI
from scui.core.schema import InterfaceSchema, TypeDescriptor, TypeKind, load_schema, resolve_name_conflict
from scui.utils.exceptions import ABIParseError


def test_parse_scalar_types():
    assert TypeDescriptor.parse("uint").canonical == "uint256"
    assert TypeDescriptor.parse("int").canonical == "int256"
    assert TypeDescriptor.parse("uint8").size == 8
    assert TypeDescriptor.parse("bytes32").kind == TypeKind.FIXED_BYTES
    assert TypeDescriptor.parse("bytes").kind == TypeKind.BYTES


def test_parse_nested_arrays():
    desc = TypeDescriptor.parse("address[2][]")
    assert desc.kind == TypeKind.ARRAY and desc.length is None
    assert desc.elem.kind == TypeKind.ARRAY and desc.elem.length == 2
    assert desc.elem.elem.kind == TypeKind.ADDRESS
    assert desc.canonical == "address[2][]"


def test_parse_tuple_components():
    desc = TypeDescriptor.parse("tuple[]", [
        {"name": "who", "type": "address"},
        {"name": "amounts", "type": "uint64[]"},
    ])
    assert desc.canonical == "(address,uint64[])[]"
    assert [name for name, _ in desc.elem.components] == ["who", "amounts"]


@pytest.mark.parametrize("type_str", ["uint7", "uint264", "bytes0", "bytes33", "float", "uint256[x]", "tuple"])
def test_invalid_types(type_str):
    with pytest.raises(ABIParseError):
        TypeDescriptor.parse(type_str)


def test_methods_split_by_mutability(token_schema):
    assert token_schema.methods["balanceOf"].constant
    assert not token_schema.methods["transfer"].constant
    assert not token_schema.methods["transfer"].payable
    assert token_schema.methods["deposit"].payable
    assert token_schema.constructor is not None
    assert [a.name for a in token_schema.constructor.inputs] == ["name", "supply"]


def test_rendered_signatures(token_schema):
    assert str(token_schema.methods["balanceOf"]) == "function balanceOf(address owner) view returns (uint256)"
    assert str(token_schema.methods["transfer"]) == "function transfer(address to, uint256 amount) returns (bool)"
    assert str(token_schema.events["Transfer"]) == (
        "event Transfer(address indexed from, address indexed to, uint256 value)"
    )
    assert token_schema.methods["transfer"].signature == "transfer(address,uint256)"


def test_indexed_inputs(token_schema):
    assert [a.name for a in token_schema.events["Transfer"].indexed_inputs] == ["from", "to"]


def test_overloads_get_numbered_names():
    abi = [
        {"type": "function", "name": "mint", "inputs": [], "outputs": []},
        {"type": "function", "name": "mint", "inputs": [{"name": "to", "type": "address"}], "outputs": []},
        {"type": "function", "name": "mint", "inputs": [{"name": "n", "type": "uint256"}], "outputs": []},
    ]
    schema = InterfaceSchema.from_abi(abi)
    assert list(schema.methods) == ["mint", "mint0", "mint1"]
    assert schema.methods["mint0"].abi_name == "mint"
    assert schema.methods["mint1"].signature == "mint(uint256)"


def test_resolve_name_conflict_skips_taken_suffixes():
    assert resolve_name_conflict("f", {"f", "f0"}) == "f1"
    assert resolve_name_conflict("g", {"f"}) == "g"


def test_legacy_constant_and_payable_flags():
    abi = [
        {"type": "function", "name": "get", "constant": True, "inputs": [], "outputs": []},
        {"type": "function", "name": "pay", "constant": False, "payable": True, "inputs": [], "outputs": []},
    ]
    schema = InterfaceSchema.from_abi(abi)
    assert schema.methods["get"].constant
    assert schema.methods["pay"].payable


def test_non_function_entries_are_skipped():
    schema = InterfaceSchema.from_abi([{"type": "fallback"}, {"type": "receive", "stateMutability": "payable"}])
    assert schema.methods == {} and schema.events == {}


def test_load_schema_plain_and_artifact(tmp_path):
    plain = tmp_path / "Token.abi"
    plain.write_text(json.dumps(TOKEN_ABI))
    artifact = tmp_path / "Token.json"
    artifact.write_text(json.dumps({"contractName": "Token", "abi": TOKEN_ABI}))
    assert list(load_schema(str(plain)).methods) == list(load_schema(str(artifact)).methods)


def test_load_schema_errors(tmp_path):
    with pytest.raises(ABIParseError, match="can't open file"):
        load_schema(str(tmp_path / "missing.abi"))

    broken = tmp_path / "broken.abi"
    broken.write_text("[{")
    with pytest.raises(ABIParseError, match="can't parse abi"):
        load_schema(str(broken))

    unknown = tmp_path / "unknown.json"
    unknown.write_text(json.dumps({"bytecode": "0x00"}))
    with pytest.raises(ABIParseError, match="unknown ABI format"):
        load_schema(str(unknown))


def test_unnamed_event_inputs_get_positional_names():
    entry = {"type": "event", "name": "Moved", "anonymous": False, "inputs": [
        {"name": "", "type": "address", "indexed": True},
        {"name": "", "type": "address", "indexed": True},
        {"name": "amount", "type": "uint256", "indexed": False},
    ]}
    event = InterfaceSchema.from_abi([entry]).events["Moved"]
    assert [a.name for a in event.inputs] == ["arg0", "arg1", "amount"]
    assert [p["name"] for p in event.abi["inputs"]] == ["arg0", "arg1", "amount"]
    assert event.signature == "Moved(address,address,uint256)"
    assert entry["inputs"][0]["name"] == ""
