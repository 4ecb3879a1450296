"""
Transaction Signers

The active signer is exactly one of three variants: no signer, a local key
or a hardware wallet account. Each produces TransactionOptions whose
``sign`` callback is bound to it; gas price, gas limit and value are left
for the caller to fill in.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Optional, Union

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from scui.utils.exceptions import AddressMismatchError, SignerNotConfiguredError
from scui.utils.logging import get_logger
from scui.wallets import HardwareWallet, WalletAccount

logger = get_logger('signer')

# (from_address, unsigned transaction dict) -> raw signed transaction
SignFunction = Callable[[str, Dict[str, Any]], bytes]


class SignerKind(str, Enum):
    NONE = "none"
    KEYED = "keyed"
    HARDWARE = "hardware"


@dataclass
class TransactionOptions:
    """Per-transaction options built from the active signer."""
    from_address: str
    sign: SignFunction = field(repr=False)
    chain_id: int
    gas_price: Optional[int] = None  # None: network suggested
    gas_limit: Optional[int] = None  # None: estimated
    value: Optional[int] = None


class NoSigner:
    """Placeholder used until a signer is configured."""
    kind: ClassVar[SignerKind] = SignerKind.NONE

    @property
    def address(self) -> Optional[str]:
        return None

    def transact_options(self, chain_id: int) -> TransactionOptions:
        raise SignerNotConfiguredError()

    def describe(self) -> str:
        return "no signer set"

    def close(self) -> None:
        pass


@dataclass(frozen=True)
class KeyedSigner:
    """Signs with a private key held in memory."""
    account: LocalAccount = field(repr=False)
    kind: ClassVar[SignerKind] = SignerKind.KEYED

    @property
    def address(self) -> str:
        return self.account.address

    def transact_options(self, chain_id: int) -> TransactionOptions:
        account = self.account

        def sign(from_address: str, tx: Dict[str, Any]) -> bytes:
            if to_checksum_address(from_address) != account.address:
                raise AddressMismatchError(account.address, from_address)
            signed = account.sign_transaction(tx)
            return bytes(signed.raw_transaction)

        return TransactionOptions(from_address=account.address, sign=sign, chain_id=chain_id)

    def describe(self) -> str:
        return f"sign with a key.\naddress: {self.address}"

    def close(self) -> None:
        pass


@dataclass(frozen=True)
class HardwareSigner:
    """Signs on a hardware wallet with one selected account."""
    wallet: HardwareWallet
    account: WalletAccount
    kind: ClassVar[SignerKind] = SignerKind.HARDWARE

    @property
    def address(self) -> str:
        return to_checksum_address(self.account.address)

    def transact_options(self, chain_id: int) -> TransactionOptions:
        wallet, account, bound = self.wallet, self.account, self.address

        def sign(from_address: str, tx: Dict[str, Any]) -> bytes:
            # Never let the device sign for an account other than the bound one
            if to_checksum_address(from_address) != bound:
                raise AddressMismatchError(bound, from_address)
            return wallet.sign_transaction(account, tx, chain_id)

        return TransactionOptions(from_address=bound, sign=sign, chain_id=chain_id)

    def describe(self) -> str:
        try:
            status = self.wallet.status()
        except Exception as e:
            status = f"can't get hardware wallet status: {e}"
        return f"sign with hardware wallet.\n{status}\naddress: {self.address}"

    def close(self) -> None:
        self.wallet.close()


Signer = Union[NoSigner, KeyedSigner, HardwareSigner]


class SignerSlot:
    """
    Holds the active signer.

    A replacement is installed only once it is fully built; the previous
    signer's exclusive resources (an open hardware session) are released
    before the swap.
    """

    def __init__(self, signer: Optional[Signer] = None):
        self._signer: Signer = signer or NoSigner()

    @property
    def signer(self) -> Signer:
        return self._signer

    @property
    def kind(self) -> SignerKind:
        return self._signer.kind

    def replace(self, signer: Signer) -> None:
        previous = self._signer
        if previous is not signer and not _shares_wallet(previous, signer):
            previous.close()
        self._signer = signer
        logger.info(f"Signer set: {signer.kind.value} {signer.address or ''}".rstrip())

    def close(self) -> None:
        """Release the active signer and fall back to no signer."""
        self._signer.close()
        self._signer = NoSigner()


def _shares_wallet(previous: Signer, new: Signer) -> bool:
    return (
        previous.kind == SignerKind.HARDWARE
        and new.kind == SignerKind.HARDWARE
        and previous.wallet is new.wallet
    )
