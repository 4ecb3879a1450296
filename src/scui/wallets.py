"""
Hardware wallet access.

The console only depends on the small ``WalletHub``/``HardwareWallet``
interface below. ``LedgerHub`` implements it on top of the ``ledgereth``
package, installed with the ``ledger`` extra.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List

from eth_utils import decode_hex, to_checksum_address

from scui.utils.exceptions import HardwareWalletError
from scui.utils.logging import get_logger

logger = get_logger('wallets')

# "x" is replaced with the account index
DERIVATION_PATH_TEMPLATES = ["m/44'/60'/x'/0/0", "m/44'/60'/0'/x"]
DEFAULT_DERIVATION_PATH = DERIVATION_PATH_TEMPLATES[0]
ADDRESSES_PER_PAGE = 5

_DERIVATION_PATH = re.compile(r"^m(/\d+'?)+$")


@dataclass(frozen=True)
class WalletAccount:
    """An address derived on a hardware wallet, with the path it came from."""
    address: str
    path: str


class HardwareWallet(ABC):
    """A single hardware wallet device."""

    @property
    @abstractmethod
    def url(self) -> str:
        """Identifier shown to the operator when choosing between devices."""

    @abstractmethod
    def open(self) -> None:
        """Open a session with the device. Raises HardwareWalletError."""

    @abstractmethod
    def close(self) -> None:
        """Release the device session."""

    @abstractmethod
    def status(self) -> str:
        """Human readable device status."""

    @abstractmethod
    def derive(self, path: str) -> WalletAccount:
        """Derive the account at a derivation path."""

    @abstractmethod
    def sign_transaction(self, account: WalletAccount, tx: Dict[str, Any], chain_id: int) -> bytes:
        """Sign a transaction with the account's key, returning the raw signed transaction."""


class WalletHub(ABC):
    """Enumerates connected hardware wallets."""

    @abstractmethod
    def wallets(self) -> List[HardwareWallet]:
        """Return the wallets currently connected."""


def expand_derivation_path(template: str, index: int) -> str:
    """
    Substitute the account index into a derivation path template.

    Raises:
        HardwareWalletError: If the result is not a valid derivation path
    """
    path = template.strip().replace("x", str(index))
    if not _DERIVATION_PATH.match(path):
        raise HardwareWalletError(f"can't parse derivation path: {path}")
    return path


def derive_accounts(wallet: HardwareWallet, template: str, start: int,
                    count: int = ADDRESSES_PER_PAGE) -> List[WalletAccount]:
    """Derive ``count`` consecutive accounts starting at index ``start``."""
    accounts = []
    for index in range(start, start + count):
        path = expand_derivation_path(template, index)
        try:
            accounts.append(wallet.derive(path))
        except HardwareWalletError:
            raise
        except Exception as e:
            raise HardwareWalletError(f"can't derive address: {e}", wallet=wallet.url)
    return accounts


def find_account(wallet: HardwareWallet, template: str, address: str,
                 count: int = ADDRESSES_PER_PAGE) -> WalletAccount:
    """
    Look for ``address`` among the first ``count`` accounts of a template.

    Raises:
        HardwareWalletError: If the address is not found
    """
    wanted = to_checksum_address(address)
    for account in derive_accounts(wallet, template, 0, count):
        if to_checksum_address(account.address) == wanted:
            return account
    raise HardwareWalletError(f"signer address not found: {wanted}", wallet=wallet.url)


class LedgerWallet(HardwareWallet):
    """Ledger device driven through ledgereth."""

    def __init__(self, index: int = 0):
        self._index = index
        self._dongle = None

    @property
    def url(self) -> str:
        return f"ledger://{self._index}"

    def open(self) -> None:
        comms = _ledgereth('comms')
        try:
            self._dongle = comms.init_dongle()
        except Exception as e:
            raise HardwareWalletError(f"can't open wallet: {e}", wallet=self.url)
        logger.debug(f"Opened {self.url}")

    def close(self) -> None:
        if self._dongle is None:
            return
        try:
            self._dongle.close()
        except Exception as e:
            logger.warning(f"Error closing {self.url}: {e}")
        self._dongle = None
        logger.debug(f"Closed {self.url}")

    def status(self) -> str:
        return "Ledger, session open" if self._dongle is not None else "Ledger, closed"

    def derive(self, path: str) -> WalletAccount:
        accounts = _ledgereth('accounts')
        try:
            account = accounts.get_account_by_path(_ledger_path(path), dongle=self._require_dongle())
        except HardwareWalletError:
            raise
        except Exception as e:
            raise HardwareWalletError(f"can't derive address: {e}", wallet=self.url)
        return WalletAccount(address=to_checksum_address(account.address), path=path)

    def sign_transaction(self, account: WalletAccount, tx: Dict[str, Any], chain_id: int) -> bytes:
        transactions = _ledgereth('transactions')
        try:
            signed = transactions.create_transaction(
                destination=tx.get('to') or b"",
                amount=tx.get('value', 0),
                gas=tx['gas'],
                nonce=tx['nonce'],
                data=tx.get('data', b""),
                gas_price=tx['gasPrice'],
                chain_id=chain_id,
                sender_path=_ledger_path(account.path),
                dongle=self._require_dongle(),
            )
        except HardwareWalletError:
            raise
        except Exception as e:
            raise HardwareWalletError(f"can't sign transaction: {e}", wallet=self.url)
        return decode_hex(signed.raw_transaction())

    def _require_dongle(self):
        if self._dongle is None:
            raise HardwareWalletError("wallet is not open", wallet=self.url)
        return self._dongle


class LedgerHub(WalletHub):
    """Finds the connected Ledger device (ledgereth drives one device at a time)."""

    def wallets(self) -> List[HardwareWallet]:
        comms = _ledgereth('comms')
        try:
            dongle = comms.init_dongle()
        except Exception as e:
            logger.debug(f"No Ledger found: {e}")
            return []
        dongle.close()
        return [LedgerWallet(0)]


def _ledger_path(path: str) -> str:
    # ledgereth takes paths without the leading "m/"
    return path[2:] if path.startswith("m/") else path


def _ledgereth(module: str):
    """Import a ledgereth submodule on first use."""
    import importlib

    try:
        return importlib.import_module(f"ledgereth.{module}")
    except ImportError:
        raise HardwareWalletError(
            "Ledger support requires the 'ledgereth' package (pip install 'scui[ledger]')"
        )
