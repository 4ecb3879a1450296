"""
Value Codec

Converts free-form operator text into typed call arguments and typed values
back into printable text, driven by a TypeDescriptor.

Parsing goes through one generic JSON primitive. To know whether the raw
text has to be quoted first, the codec builds the zero value of the target
shape and looks at how that zero value serializes: shapes that serialize
as JSON strings (string, address, bytes, bytesN) get the operator's text
quoted, everything else (numbers, booleans, arrays, tuples) is parsed as
typed. This keeps "42" a string for ``string`` and a number for ``uint256``.
"""

import json
from typing import Any, List, Sequence

from eth_abi import is_encodable
from eth_utils import decode_hex, is_hex, remove_0x_prefix, to_checksum_address
from eth_utils.address import is_address

from scui.utils.exceptions import ValueCodecError
from .schema import Argument, TypeDescriptor, TypeKind

ZERO_ADDRESS = "0x" + "00" * 20
NULL_TEXT = "null"


def zero_value(type_desc: TypeDescriptor) -> Any:
    """Return the zero value of a shape (always the dereferenced shape)."""
    kind = type_desc.kind
    if kind in (TypeKind.UINT, TypeKind.INT):
        return 0
    if kind == TypeKind.BOOL:
        return False
    if kind == TypeKind.ADDRESS:
        return ZERO_ADDRESS
    if kind == TypeKind.STRING:
        return ""
    if kind == TypeKind.BYTES:
        return b""
    if kind == TypeKind.FIXED_BYTES:
        return bytes(type_desc.size)
    if kind == TypeKind.ARRAY:
        if type_desc.length is None:
            return []
        return [zero_value(type_desc.elem) for _ in range(type_desc.length)]
    if kind == TypeKind.TUPLE:
        return tuple(zero_value(t) for _, t in type_desc.components)
    raise ValueCodecError(f"unsupported type: {type_desc}", type_name=str(type_desc))


def to_jsonable(value: Any) -> Any:
    """Convert decoded ABI values into JSON-serializable objects."""
    if isinstance(value, (bytes, bytearray)):
        return '0x' + bytes(value).hex()
    elif isinstance(value, dict) or hasattr(value, 'items'):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def serializes_as_text(type_desc: TypeDescriptor) -> bool:
    """Probe: does the zero value of this shape serialize to a JSON string?"""
    probe = json.dumps(to_jsonable(zero_value(type_desc.deref())))
    return probe.startswith('"')


def encode(text: str, type_desc: TypeDescriptor) -> Any:
    """
    Convert operator text into a value of the given shape.

    Args:
        text: Raw text as typed by the operator
        type_desc: Target shape

    Returns:
        A value accepted by eth_abi for ``type_desc.canonical``
        (None for an optional shape given ``null``)

    Raises:
        ValueCodecError: If the text can't be parsed into the shape
    """
    target = type_desc.deref()
    if type_desc.optional and text.strip() == NULL_TEXT:
        return None

    raw = json.dumps(text) if serializes_as_text(target) else text
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueCodecError(
            f"can't parse {text!r} as {target}: {e.msg}", type_name=str(target)
        )

    value = from_jsonable(data, target)
    if not is_encodable(target.canonical, value):
        raise ValueCodecError(f"value {text!r} doesn't fit {target}", type_name=str(target))
    return value


def from_jsonable(data: Any, type_desc: TypeDescriptor) -> Any:
    """
    Normalize parsed JSON into the Python value eth_abi expects for a shape.

    Raises:
        ValueCodecError: If the data doesn't match the shape
    """
    kind = type_desc.kind
    type_name = str(type_desc)

    if kind in (TypeKind.UINT, TypeKind.INT):
        if isinstance(data, bool):
            raise ValueCodecError(f"expected a number for {type_name}", type_name=type_name)
        if isinstance(data, int):
            return data
        if isinstance(data, str):
            # Nested numbers may be given as decimal or 0x strings
            try:
                return int(data, 0)
            except ValueError:
                pass
        raise ValueCodecError(f"expected a number for {type_name}, got {data!r}", type_name=type_name)

    if kind == TypeKind.BOOL:
        if isinstance(data, bool):
            return data
        raise ValueCodecError(f"expected true or false, got {data!r}", type_name=type_name)

    if kind == TypeKind.ADDRESS:
        if isinstance(data, str):
            candidate = data if data.startswith('0x') else '0x' + data
            if is_address(candidate.lower()):
                return to_checksum_address(candidate)
        raise ValueCodecError(f"invalid address: {data!r}", type_name=type_name)

    if kind == TypeKind.STRING:
        if isinstance(data, str):
            return data
        raise ValueCodecError(f"expected a string, got {data!r}", type_name=type_name)

    if kind in (TypeKind.BYTES, TypeKind.FIXED_BYTES):
        if not isinstance(data, str):
            raise ValueCodecError(f"expected hex data, got {data!r}", type_name=type_name)
        if data and (not is_hex(data) or len(remove_0x_prefix(data)) % 2):
            raise ValueCodecError(f"expected hex data, got {data!r}", type_name=type_name)
        value = decode_hex(data)
        if kind == TypeKind.FIXED_BYTES:
            if len(value) > type_desc.size:
                raise ValueCodecError(
                    f"{len(value)} bytes don't fit {type_name}", type_name=type_name
                )
            value = value.ljust(type_desc.size, b"\x00")
        return value

    if kind == TypeKind.ARRAY:
        if not isinstance(data, list):
            raise ValueCodecError(f"expected a JSON array for {type_name}", type_name=type_name)
        if type_desc.length is not None and len(data) != type_desc.length:
            raise ValueCodecError(
                f"expected {type_desc.length} elements for {type_name}, got {len(data)}",
                type_name=type_name,
            )
        return [from_jsonable(item, type_desc.elem) for item in data]

    if kind == TypeKind.TUPLE:
        names = [name for name, _ in type_desc.components]
        if isinstance(data, dict):
            missing = [n for n in names if n not in data]
            if missing:
                raise ValueCodecError(
                    f"missing tuple fields: {', '.join(missing)}", type_name=type_name
                )
            data = [data[n] for n in names]
        if not isinstance(data, list) or len(data) != len(names):
            raise ValueCodecError(
                f"expected {len(names)} tuple fields for {type_name}", type_name=type_name
            )
        return tuple(
            from_jsonable(item, t) for item, (_, t) in zip(data, type_desc.components)
        )

    raise ValueCodecError(f"unsupported type: {type_name}", type_name=type_name)


def decode(value: Any, type_desc: TypeDescriptor = None) -> str:
    """
    Render a value as canonical display text.

    Textual values are rendered bare and everything else as compact JSON,
    so that ``encode(decode(v, t), t) == v``.

    Raises:
        ValueCodecError: If the value can't be rendered
    """
    data = to_jsonable(value)
    if isinstance(data, str):
        return data
    try:
        return json.dumps(data, separators=(',', ':'))
    except (TypeError, ValueError) as e:
        type_name = str(type_desc) if type_desc else type(value).__name__
        raise ValueCodecError(f"can't render value: {e}", type_name=type_name)


def unpack_results(outputs: Sequence[Argument], raw: Any) -> Any:
    """
    Shape a call result by the method's declared outputs.

    No outputs give an empty list, a single output is returned unwrapped
    and several outputs are collected into a list in declaration order.
    """
    if len(outputs) == 0:
        return []
    if len(outputs) == 1:
        return raw
    return list(raw)


def results_as_list(outputs: Sequence[Argument], results: Any) -> List[Any]:
    """Inverse of the single-value unwrapping done by unpack_results."""
    if len(outputs) == 1:
        return [results]
    return list(results)
