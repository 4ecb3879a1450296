"""
Miscellaneous helper functions for scui.
"""

import sys
from typing import NoReturn

from eth_utils import to_checksum_address
from eth_utils.address import is_address

from .colors import error


def error_exit(code: int, message: str) -> NoReturn:
    """
    Print a startup error to stderr and terminate with the given exit code.

    Args:
        code: Process exit code (small negative integers, one per failure category)
        message: Message to print
    """
    print(error(message), file=sys.stderr)
    sys.exit(code)


def normalize_address(address: str) -> str:
    """
    Normalize an Ethereum address to checksum format.

    Args:
        address: Ethereum address (with or without 0x prefix)

    Returns:
        Checksummed address

    Raises:
        ValueError: If address is invalid
    """
    if not address:
        raise ValueError("Address cannot be empty")

    if not address.startswith('0x'):
        address = '0x' + address

    if not is_address(address):
        raise ValueError(f"Invalid Ethereum address: {address}")

    return to_checksum_address(address)


def parse_wei(value_str: str, what: str = "amount") -> int:
    """
    Parse a non-negative base-10 wei amount.

    Raises:
        ValueError: If the string is not a non-negative integer
    """
    try:
        value = int(value_str, 10)
    except (TypeError, ValueError):
        raise ValueError(f"invalid {what}: {value_str}")
    if value < 0:
        raise ValueError(f"invalid {what}: {value_str}")
    return value
