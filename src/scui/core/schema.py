"""
Contract Interface Schema

Loads a contract ABI into immutable method/event descriptors and the type
descriptors the value codec works from. Overloaded names are made unique
by suffixing an index, and each descriptor keeps its raw ABI entry so the
network client can bind exactly that function or event.
"""

import json
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from scui.utils.exceptions import ABIParseError
from scui.utils.logging import get_logger

logger = get_logger('schema')

_ARRAY_SUFFIX = re.compile(r'\[(\d*)\]')
_SIZED_BASE = re.compile(r'^(uint|int|bytes)(\d+)$')


class TypeKind(str, Enum):
    """Primitive and composite ABI shapes."""
    UINT = "uint"
    INT = "int"
    BOOL = "bool"
    ADDRESS = "address"
    STRING = "string"
    BYTES = "bytes"
    FIXED_BYTES = "fixed_bytes"
    ARRAY = "array"
    TUPLE = "tuple"


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Shape of a single ABI value.

    ``size`` is the bit width of integers and the byte length of ``bytesN``.
    ``length`` is the element count of fixed arrays (None for dynamic ones).
    ``optional`` marks a value that may be absent; it is parsed as the inner
    shape and only then allowed to be null.
    """
    kind: TypeKind
    size: Optional[int] = None
    elem: Optional["TypeDescriptor"] = None
    length: Optional[int] = None
    components: Tuple[Tuple[str, "TypeDescriptor"], ...] = ()
    optional: bool = False

    @property
    def canonical(self) -> str:
        """Type string as understood by eth_abi, e.g. ``(uint256,address)[]``."""
        if self.kind in (TypeKind.UINT, TypeKind.INT):
            return f"{self.kind.value}{self.size}"
        if self.kind == TypeKind.FIXED_BYTES:
            return f"bytes{self.size}"
        if self.kind == TypeKind.ARRAY:
            suffix = "" if self.length is None else str(self.length)
            return f"{self.elem.canonical}[{suffix}]"
        if self.kind == TypeKind.TUPLE:
            return "(" + ",".join(t.canonical for _, t in self.components) + ")"
        return self.kind.value

    def deref(self) -> "TypeDescriptor":
        """The same shape without the optional indirection."""
        if not self.optional:
            return self
        return replace(self, optional=False)

    def __str__(self) -> str:
        return self.canonical

    @classmethod
    def parse(cls, type_str: str, components: Optional[List[Dict[str, Any]]] = None) -> "TypeDescriptor":
        """
        Parse an ABI type string.

        Args:
            type_str: ABI type, e.g. ``uint256``, ``address[2][]``, ``tuple[]``
            components: ABI components for tuple types

        Returns:
            TypeDescriptor

        Raises:
            ABIParseError: If the type is unknown or malformed
        """
        type_str = type_str.strip()
        bracket = type_str.find('[')
        base = type_str if bracket < 0 else type_str[:bracket]
        dims = "" if bracket < 0 else type_str[bracket:]
        if _ARRAY_SUFFIX.sub("", dims):
            raise ABIParseError(f"malformed array type: {type_str}")

        descriptor = cls._parse_base(base, components, type_str)
        # uint256[2][] is a dynamic array of uint256[2]
        for match in _ARRAY_SUFFIX.finditer(dims):
            length = int(match.group(1)) if match.group(1) else None
            descriptor = cls(kind=TypeKind.ARRAY, elem=descriptor, length=length)
        return descriptor

    @classmethod
    def _parse_base(cls, base: str, components, type_str: str) -> "TypeDescriptor":
        if base == "tuple":
            if components is None:
                raise ABIParseError(f"tuple type without components: {type_str}")
            parsed = tuple(
                (comp.get("name", ""), cls.from_abi(comp)) for comp in components
            )
            return cls(kind=TypeKind.TUPLE, components=parsed)
        if base == "uint":
            return cls(kind=TypeKind.UINT, size=256)
        if base == "int":
            return cls(kind=TypeKind.INT, size=256)
        if base == "bool":
            return cls(kind=TypeKind.BOOL)
        if base == "address":
            return cls(kind=TypeKind.ADDRESS)
        if base == "string":
            return cls(kind=TypeKind.STRING)
        if base == "bytes":
            return cls(kind=TypeKind.BYTES)

        match = _SIZED_BASE.match(base)
        if match:
            prefix, size = match.group(1), int(match.group(2))
            if prefix == "bytes":
                if not 1 <= size <= 32:
                    raise ABIParseError(f"invalid fixed bytes size: {type_str}")
                return cls(kind=TypeKind.FIXED_BYTES, size=size)
            if size % 8 or not 8 <= size <= 256:
                raise ABIParseError(f"invalid integer size: {type_str}")
            kind = TypeKind.UINT if prefix == "uint" else TypeKind.INT
            return cls(kind=kind, size=size)

        raise ABIParseError(f"unsupported type: {type_str}")

    @classmethod
    def from_abi(cls, param: Dict[str, Any]) -> "TypeDescriptor":
        """Build a descriptor from an ABI input/output entry."""
        if "type" not in param:
            raise ABIParseError(f"parameter without type: {param}")
        return cls.parse(param["type"], param.get("components"))


@dataclass(frozen=True)
class Argument:
    """A named method input/output or event field."""
    name: str
    type: TypeDescriptor
    indexed: bool = False

    def __str__(self) -> str:
        parts = [str(self.type)]
        if self.indexed:
            parts.append("indexed")
        if self.name:
            parts.append(self.name)
        return " ".join(parts)

    @classmethod
    def from_abi(cls, param: Dict[str, Any]) -> "Argument":
        return cls(
            name=param.get("name", ""),
            type=TypeDescriptor.from_abi(param),
            indexed=bool(param.get("indexed", False)),
        )


@dataclass(frozen=True)
class MethodDescriptor:
    """A callable contract function (or the constructor)."""
    name: str
    abi_name: str
    inputs: Tuple[Argument, ...]
    outputs: Tuple[Argument, ...]
    state_mutability: str
    abi: Dict[str, Any] = field(compare=False, hash=False, repr=False)

    @property
    def constant(self) -> bool:
        return self.state_mutability in ("view", "pure")

    @property
    def payable(self) -> bool:
        return self.state_mutability == "payable"

    @property
    def signature(self) -> str:
        """Canonical signature used for the selector, e.g. ``transfer(address,uint256)``."""
        return f"{self.abi_name}({','.join(a.type.canonical for a in self.inputs)})"

    def __str__(self) -> str:
        inputs = ", ".join(str(a) for a in self.inputs)
        state = ""
        if self.state_mutability and self.state_mutability != "nonpayable":
            state = f" {self.state_mutability}"
        if self.abi.get("type") == "constructor":
            return f"constructor({inputs}){state}"
        outputs = ", ".join(str(a) for a in self.outputs)
        return f"function {self.name}({inputs}){state} returns ({outputs})"

    @classmethod
    def from_abi(cls, entry: Dict[str, Any], name: Optional[str] = None) -> "MethodDescriptor":
        return cls(
            name=name or entry.get("name", ""),
            abi_name=entry.get("name", ""),
            inputs=tuple(Argument.from_abi(p) for p in entry.get("inputs", [])),
            outputs=tuple(Argument.from_abi(p) for p in entry.get("outputs", [])),
            state_mutability=_state_mutability(entry),
            abi=entry,
        )


@dataclass(frozen=True)
class EventDescriptor:
    """A contract event."""
    name: str
    abi_name: str
    inputs: Tuple[Argument, ...]
    anonymous: bool
    abi: Dict[str, Any] = field(compare=False, hash=False, repr=False)

    @property
    def indexed_inputs(self) -> Tuple[Argument, ...]:
        return tuple(a for a in self.inputs if a.indexed)

    @property
    def signature(self) -> str:
        return f"{self.abi_name}({','.join(a.type.canonical for a in self.inputs)})"

    def __str__(self) -> str:
        inputs = ", ".join(str(a) for a in self.inputs)
        anonymous = " anonymous" if self.anonymous else ""
        return f"event {self.name}({inputs}){anonymous}"

    @classmethod
    def from_abi(cls, entry: Dict[str, Any], name: Optional[str] = None) -> "EventDescriptor":
        entry = _name_event_inputs(entry)
        return cls(
            name=name or entry.get("name", ""),
            abi_name=entry.get("name", ""),
            inputs=tuple(Argument.from_abi(p) for p in entry.get("inputs", [])),
            anonymous=bool(entry.get("anonymous", False)),
            abi=entry,
        )


@dataclass(frozen=True)
class InterfaceSchema:
    """
    Immutable view of a contract interface.

    Methods and events keep ABI declaration order and are keyed by their
    unique (possibly suffixed) name.
    """
    methods: Dict[str, MethodDescriptor]
    events: Dict[str, EventDescriptor]
    constructor: Optional[MethodDescriptor]
    abi: List[Dict[str, Any]] = field(repr=False)

    @classmethod
    def from_abi(cls, abi: List[Dict[str, Any]]) -> "InterfaceSchema":
        """
        Build a schema from a decoded ABI array.

        Raises:
            ABIParseError: If an entry can't be parsed
        """
        if not isinstance(abi, list):
            raise ABIParseError("ABI must be a list of entries")

        methods: Dict[str, MethodDescriptor] = {}
        events: Dict[str, EventDescriptor] = {}
        constructor = None
        for entry in abi:
            if not isinstance(entry, dict):
                raise ABIParseError(f"invalid ABI entry: {entry!r}")
            entry_type = entry.get("type", "function")
            if entry_type == "function":
                name = resolve_name_conflict(entry.get("name", ""), methods)
                methods[name] = MethodDescriptor.from_abi(entry, name)
            elif entry_type == "event":
                name = resolve_name_conflict(entry.get("name", ""), events)
                events[name] = EventDescriptor.from_abi(entry, name)
            elif entry_type == "constructor":
                constructor = MethodDescriptor.from_abi(entry, "constructor")
            else:
                # fallback, receive, error
                logger.debug(f"Skipping ABI entry of type {entry_type}")

        return cls(methods=methods, events=events, constructor=constructor, abi=abi)


def resolve_name_conflict(raw_name: str, used) -> str:
    """
    Return ``raw_name`` or, when taken, the first free ``raw_name<N>`` (N from 0).
    """
    name = raw_name
    index = 0
    while name in used:
        name = f"{raw_name}{index}"
        index += 1
    return name


def _name_event_inputs(entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Give unnamed event inputs the positional name ``arg<N>``.

    Decoded log args and argument filters are keyed by input name, so two
    unnamed fields would otherwise share the key "". The topic only depends
    on the input types.
    """
    inputs = entry.get("inputs", [])
    if all(p.get("name") for p in inputs):
        return entry
    named = [p if p.get("name") else {**p, "name": f"arg{i}"} for i, p in enumerate(inputs)]
    return {**entry, "inputs": named}


def _state_mutability(entry: Dict[str, Any]) -> str:
    mutability = entry.get("stateMutability")
    if mutability:
        return mutability
    # Pre-0.5 ABIs only carry the constant/payable flags
    if entry.get("constant"):
        return "view"
    if entry.get("payable"):
        return "payable"
    return "nonpayable"


def load_schema(abi_path: str) -> InterfaceSchema:
    """
    Load an interface schema from an ABI file.

    Both direct ABI arrays and artifact files with an ``abi`` key are accepted.

    Raises:
        ABIParseError: If the file can't be read or parsed
    """
    try:
        with open(abi_path, 'r') as f:
            data = json.load(f)
    except OSError as e:
        raise ABIParseError(f"can't open file: {e}", source=abi_path)
    except json.JSONDecodeError as e:
        raise ABIParseError(f"can't parse abi: {e}", source=abi_path)

    if isinstance(data, dict) and 'abi' in data:
        data = data['abi']
    if not isinstance(data, list):
        raise ABIParseError(f"unknown ABI format in {abi_path}", source=abi_path)

    schema = InterfaceSchema.from_abi(data)
    logger.debug(
        f"Loaded ABI from {abi_path}: {len(schema.methods)} methods, {len(schema.events)} events"
    )
    return schema
