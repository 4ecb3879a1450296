"""
Custom exceptions for scui.

This module provides a hierarchy of exceptions for the different error cases
of the console, along with utilities for formatting errors consistently.
Startup errors are fatal; everything raised while an action runs is caught
at the dispatcher and reported without ending the session.
"""

from typing import Any, Dict, Optional


class ScuiError(Exception):
    """
    Base exception for all scui errors.

    Attributes:
        message: Human-readable error message
        details: Additional context as key-value pairs
        error_code: Optional error code for programmatic handling
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__
        super().__init__(message)


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(ScuiError):
    """Raised when command line configuration is invalid."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, kwargs, "ConfigurationError")


class MutuallyExclusiveArgumentsError(ConfigurationError):
    """Raised when two flags that exclude each other are both given."""

    def __init__(self, first: str, second: str):
        super().__init__(
            f"{first} and {second} are mutually exclusive",
            arguments=[first, second],
        )
        self.error_code = "MutuallyExclusiveArgumentsError"


class SignerArgumentsMissingError(ConfigurationError):
    """Raised when no signer flag was given to a command that needs one."""

    def __init__(self):
        super().__init__("signer arguments missing")
        self.error_code = "SignerArgumentsMissingError"


class InvalidAmountError(ConfigurationError):
    """Raised when a wei amount (gas price, value) is not a non-negative integer."""

    def __init__(self, what: str, value: str):
        super().__init__(f"invalid {what}: {value}", value=value)
        self.error_code = "InvalidAmountError"


# ============================================================================
# Connection Errors
# ============================================================================

class RPCConnectionError(ScuiError):
    """Raised when RPC connection fails."""

    def __init__(self, message: str, rpc_url: Optional[str] = None, **kwargs):
        details = {"rpc_url": rpc_url} if rpc_url else {}
        details.update(kwargs)
        super().__init__(message, details, "RPCConnectionError")


# ============================================================================
# Transaction Errors
# ============================================================================

class TransactionError(ScuiError):
    """Raised when a transaction can't be built, signed or sent."""

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        **kwargs
    ):
        details = {}
        if tx_hash:
            details["tx_hash"] = tx_hash
        details.update(kwargs)
        super().__init__(message, details, "TransactionError")


class SubscriptionError(ScuiError):
    """Raised when a live log subscription reports a failure."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, kwargs, "SubscriptionError")


# ============================================================================
# Parsing Errors
# ============================================================================

class ParseError(ScuiError):
    """Raised when parsing fails."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        details = {"source": source} if source else {}
        details.update(kwargs)
        super().__init__(message, details, "ParseError")


class ABIParseError(ParseError):
    """Raised when ABI parsing fails."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.error_code = "ABIParseError"


class ValueCodecError(ParseError):
    """Raised when text can't be converted into a value of the requested type."""

    def __init__(self, message: str, type_name: Optional[str] = None, **kwargs):
        if type_name:
            kwargs["type"] = type_name
        super().__init__(message, **kwargs)
        self.error_code = "ValueCodecError"


# ============================================================================
# Signer Errors
# ============================================================================

class SignerError(ScuiError):
    """Base class for signer errors."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, kwargs, "SignerError")


class SignerNotConfiguredError(SignerError):
    """Raised when a transaction is attempted without a signer."""

    def __init__(self):
        super().__init__("signer not configured")
        self.error_code = "SignerNotConfiguredError"


class AddressMismatchError(SignerError):
    """Raised when a hardware signer is asked to sign for another account."""

    def __init__(self, expected: str, requested: str):
        super().__init__(
            f"address not found: signer is bound to {expected}, asked to sign for {requested}",
            expected=expected,
            requested=requested,
        )
        self.error_code = "AddressMismatchError"


class KeyFileError(SignerError):
    """Raised when a key file can't be read, decrypted or imported."""

    def __init__(self, message: str, path: Optional[str] = None):
        kwargs = {"path": path} if path else {}
        super().__init__(message, **kwargs)
        self.error_code = "KeyFileError"


class HardwareWalletError(SignerError):
    """Raised when a hardware wallet can't be found, opened or used."""

    def __init__(self, message: str, wallet: Optional[str] = None):
        kwargs = {"wallet": wallet} if wallet else {}
        super().__init__(message, **kwargs)
        self.error_code = "HardwareWalletError"


# ============================================================================
# Dispatch Errors
# ============================================================================

class DispatchError(ScuiError):
    """Raised when a resolved command can't be executed as requested."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, kwargs, "DispatchError")


class MethodNotConstantError(DispatchError):
    """Raised when a constant call targets a mutating method."""

    def __init__(self, method: str):
        super().__init__("method is not constant", method=method)
        self.error_code = "MethodNotConstantError"


class MethodConstantError(DispatchError):
    """Raised when a transaction targets a constant method."""

    def __init__(self, method: str):
        super().__init__("method is constant", method=method)
        self.error_code = "MethodConstantError"


class AbortedError(ScuiError):
    """Raised when the operator declines or cancels an interactive prompt."""

    def __init__(self, message: str = "aborted"):
        super().__init__(message, None, "AbortedError")


# ============================================================================
# Error Formatting Utilities
# ============================================================================

def format_exception_message(e: Exception) -> str:
    """
    Extract a clean, user-friendly error message from any exception.

    Args:
        e: Exception instance

    Returns:
        Clean error message string
    """
    if isinstance(e, ScuiError):
        return e.message

    # Web3RPCError and similar have args[0] as dict
    if hasattr(e, 'args') and e.args:
        first_arg = e.args[0]

        if isinstance(first_arg, dict):
            # RPC error format: {'code': -32003, 'message': '...'}
            return first_arg.get('message', str(e))
        elif isinstance(first_arg, str):
            return first_arg
        else:
            return str(first_arg)

    return str(e) or type(e).__name__
