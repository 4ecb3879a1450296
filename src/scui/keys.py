"""
Key material loading.

Raw keys are hex files; encrypted keys are Ethereum keystore (v3) JSON files
decrypted with eth_account.
"""

import getpass
import json

from eth_account import Account
from eth_account.signers.local import LocalAccount

from scui.utils.exceptions import KeyFileError
from scui.utils.logging import get_logger

logger = get_logger('keys')


def parse_key(key_bytes: bytes, encrypted: bool, password: str = "") -> LocalAccount:
    """
    Turn key file contents into a signing account.

    Args:
        key_bytes: File contents (hex private key, or keystore JSON when encrypted)
        encrypted: Whether the contents are a keystore
        password: Keystore password

    Returns:
        LocalAccount holding the private key

    Raises:
        KeyFileError: If the key can't be decrypted or imported
    """
    if encrypted:
        try:
            keystore = json.loads(key_bytes)
            private_key = Account.decrypt(keystore, password)
        except (ValueError, TypeError, KeyError) as e:
            raise KeyFileError(f"can't decrypt key: {e}")
        return Account.from_key(private_key)

    try:
        return Account.from_key(key_bytes.decode('ascii').strip())
    except (ValueError, TypeError, UnicodeDecodeError) as e:
        raise KeyFileError(f"can't import key: {e}")


def read_key_file(path: str, encrypted: bool, password: str = "") -> LocalAccount:
    """Read and parse a key file. Raises KeyFileError."""
    try:
        with open(path, 'rb') as f:
            key_bytes = f.read()
    except OSError as e:
        raise KeyFileError(f"can't read file: {e}", path=path)
    account = parse_key(key_bytes, encrypted, password)
    logger.debug(f"Loaded key for {account.address} from {path}")
    return account


def prompt_password(prompt: str = "password: ") -> str:
    """Read a password from the terminal without echo."""
    try:
        return getpass.getpass(prompt)
    except (EOFError, OSError) as e:
        raise KeyFileError(f"can't read from terminal: {e}")
