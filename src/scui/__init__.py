"""
scui - Interactive Smart Contract Console
"""

__version__ = "0.1.0"

# Main entry points
from .cli.main import main
from .cli.deploy import main as deploy_main

# Core components
from .core import (
    InterfaceSchema,
    MethodDescriptor,
    EventDescriptor,
    TypeDescriptor,
    load_schema,
    encode,
    decode,
    SignerSlot,
    ContractClient,
)

# Console
from .menu import MenuNode, build_tree, resolve
from .dispatcher import ActionDispatcher
from .console import ContractConsole
from .config import Settings

# Utilities
from .utils import (
    ScuiError,
    AbortedError,
    setup_logging,
    get_logger,
)

__all__ = [
    'main',
    'deploy_main',
    'InterfaceSchema',
    'MethodDescriptor',
    'EventDescriptor',
    'TypeDescriptor',
    'load_schema',
    'encode',
    'decode',
    'SignerSlot',
    'ContractClient',
    'MenuNode',
    'build_tree',
    'resolve',
    'ActionDispatcher',
    'ContractConsole',
    'Settings',
    'ScuiError',
    'AbortedError',
    'setup_logging',
    'get_logger',
]
