"""
Utilities module for scui.

Provides exception handling, logging, colors, and helper functions.
"""

from .exceptions import (
    ScuiError,
    ConfigurationError,
    MutuallyExclusiveArgumentsError,
    SignerArgumentsMissingError,
    InvalidAmountError,
    RPCConnectionError,
    TransactionError,
    SubscriptionError,
    ParseError,
    ABIParseError,
    ValueCodecError,
    SignerError,
    SignerNotConfiguredError,
    AddressMismatchError,
    KeyFileError,
    HardwareWalletError,
    DispatchError,
    MethodNotConstantError,
    MethodConstantError,
    AbortedError,
    format_exception_message,
)
from .logging import setup_logging, get_logger, logger
from .colors import (
    Colors,
    SUPPORTS_COLOR,
    cyan, bold, dim,
    error, success, warning, info,
    address, bullet_point,
)
from .helpers import error_exit, normalize_address, parse_wei

__all__ = [
    # Exceptions
    'ScuiError',
    'ConfigurationError',
    'MutuallyExclusiveArgumentsError',
    'SignerArgumentsMissingError',
    'InvalidAmountError',
    'RPCConnectionError',
    'TransactionError',
    'SubscriptionError',
    'ParseError',
    'ABIParseError',
    'ValueCodecError',
    'SignerError',
    'SignerNotConfiguredError',
    'AddressMismatchError',
    'KeyFileError',
    'HardwareWalletError',
    'DispatchError',
    'MethodNotConstantError',
    'MethodConstantError',
    'AbortedError',
    # Formatting
    'format_exception_message',
    # Logging
    'setup_logging',
    'get_logger',
    'logger',
    # Colors
    'Colors',
    'SUPPORTS_COLOR',
    'cyan', 'bold', 'dim',
    'error', 'success', 'warning', 'info',
    'address', 'bullet_point',
    # Helpers
    'error_exit',
    'normalize_address',
    'parse_wei',
]
