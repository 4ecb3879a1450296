"""
Core module for scui.

This module contains the pieces the console is built from:
- schema: contract interface descriptors loaded from an ABI
- codec: text <-> typed value conversion
- signer: keyed / hardware / no-signer variants
- client: web3 access to the node
- events: log filters, listing and watching
"""

from .schema import (
    TypeKind,
    TypeDescriptor,
    Argument,
    MethodDescriptor,
    EventDescriptor,
    InterfaceSchema,
    load_schema,
)
from .codec import encode, decode, zero_value, unpack_results
from .signer import (
    SignerKind,
    TransactionOptions,
    NoSigner,
    KeyedSigner,
    HardwareSigner,
    SignerSlot,
)
from .client import ContractClient, LogSubscription
from .events import FilterSlot, FilterSpec, build_filter, list_events, watch_events

__all__ = [
    'TypeKind',
    'TypeDescriptor',
    'Argument',
    'MethodDescriptor',
    'EventDescriptor',
    'InterfaceSchema',
    'load_schema',
    'encode',
    'decode',
    'zero_value',
    'unpack_results',
    'SignerKind',
    'TransactionOptions',
    'NoSigner',
    'KeyedSigner',
    'HardwareSigner',
    'SignerSlot',
    'ContractClient',
    'LogSubscription',
    'FilterSlot',
    'FilterSpec',
    'build_filter',
    'list_events',
    'watch_events',
]
