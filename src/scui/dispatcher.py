"""
Action Dispatcher

Executes the leaf an operator selected: constant calls, transactions, event
listing and watching, and the named side-effect commands (signer
configuration) looked up by their full menu path. Every failure of an
action is reported here and control goes back to the read loop.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from scui import prompts
from scui.config import Settings
from scui.core.client import ContractClient
from scui.core.codec import decode, encode, results_as_list, unpack_results
from scui.core.events import build_filter, format_event, interrupt_signal, list_events, watch_events
from scui.core.schema import Argument, EventDescriptor, InterfaceSchema, MethodDescriptor
from scui.core.signer import HardwareSigner, KeyedSigner, SignerKind, SignerSlot
from scui.keys import read_key_file
from scui.menu import ActionKind, CommandMenu, MenuNode
from scui.utils.colors import address, bold, dim, error, info, success, warning
from scui.utils.exceptions import (
    AbortedError,
    MethodConstantError,
    MethodNotConstantError,
    ScuiError,
    ValueCodecError,
    format_exception_message,
)
from scui.utils.logging import get_logger
from scui.wallets import (
    ADDRESSES_PER_PAGE,
    DERIVATION_PATH_TEMPLATES,
    HardwareWallet,
    LedgerHub,
    WalletAccount,
    WalletHub,
    derive_accounts,
    expand_derivation_path,
)

logger = get_logger('dispatcher')

SIGNER_MENU = CommandMenu(
    "signer",
    "configure the transaction signer",
    (
        ("key", "sign with a private key file"),
        ("ledger", "sign with a Ledger hardware wallet"),
        ("show", "show the current signer"),
    ),
)

MORE_CHOICE = "more"
CUSTOM_PATH_CHOICE = "custom"


def collect_arguments(inputs: Sequence[Argument]) -> List[Any]:
    """
    Prompt for every input argument and encode it with the Value Codec.

    An empty line is not a value: the prompt is repeated.

    Raises:
        AbortedError: If the operator types ``..``
        ValueCodecError: If a value can't be encoded
    """
    values = []
    for index, arg in enumerate(inputs):
        label = arg.name or f"arg{index}"
        while True:
            text = prompts.input_text(f"{label} ({arg.type}): ")
            if text == prompts.ABORT_INPUT:
                raise AbortedError()
            if text != "":
                break
            print(dim("value required, '..' to cancel"))
        values.append(encode(text, arg.type))
    return values


class ActionDispatcher:
    """
    Runs the actions bound to menu leaves.

    Args:
        client: Node access for the contract
        schema: Contract interface
        signers: Slot holding the active signer
        settings: Runtime settings
        hub_factory: Builds the hardware wallet hub used by ``signer/ledger``
    """

    def __init__(self, client: ContractClient, schema: InterfaceSchema, signers: SignerSlot,
                 settings: Optional[Settings] = None,
                 hub_factory: Callable[[], WalletHub] = LedgerHub):
        self.client = client
        self.schema = schema
        self.signers = signers
        self.settings = settings or Settings()
        self.hub_factory = hub_factory
        self._chain_id: Optional[int] = None
        self.commands: Dict[str, Callable[[], None]] = {
            "signer/key": self.configure_key_signer,
            "signer/ledger": self.configure_ledger_signer,
            "signer/show": self.show_signer,
        }

    @property
    def command_menus(self) -> List[CommandMenu]:
        return [SIGNER_MENU]

    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = self.client.chain_id()
        return self._chain_id

    def dispatch(self, leaf: MenuNode) -> None:
        """Run the action of a leaf, reporting any failure with context."""
        kind = leaf.action
        try:
            if kind == ActionKind.CONSTANT_CALL:
                self.constant_call(leaf.target)
            elif kind == ActionKind.TRANSACT:
                self.transact(leaf.target)
            elif kind == ActionKind.LIST_EVENTS:
                self.list_events(leaf.target)
            elif kind == ActionKind.WATCH_EVENTS:
                self.watch_events(leaf.target)
            elif kind == ActionKind.COMMAND:
                self.run_command(leaf.name())
            else:
                raise ValueError(f"no action for {leaf.name()}")
        except AbortedError:
            print(warning("aborted"))
        except KeyboardInterrupt:
            print()
            print(warning("aborted"))
        except Exception as e:
            if isinstance(e, ScuiError):
                logger.debug(f"Action {leaf.name()} failed: {e.error_code} {e.details}", exc_info=True)
            else:
                logger.debug(f"Action {leaf.name()} failed", exc_info=True)
            print(f"{error(self._failure_context(leaf))}: {format_exception_message(e)}")

    @staticmethod
    def _failure_context(leaf: MenuNode) -> str:
        kind = leaf.action
        if kind == ActionKind.CONSTANT_CALL:
            return f"can't execute constant method {leaf.label}"
        if kind == ActionKind.TRANSACT:
            return f"can't send transaction to method {leaf.label}"
        if kind == ActionKind.LIST_EVENTS:
            return "error listing logs"
        if kind == ActionKind.WATCH_EVENTS:
            return "error watching logs"
        return f"can't execute {leaf.name()}"

    def run_command(self, path: str) -> None:
        command = self.commands.get(path)
        if command is None:
            print(f"{error('invalid command:')} {path}")
            return
        command()

    # Contract actions

    def constant_call(self, method: MethodDescriptor) -> Any:
        """
        Call a constant method and print its results.

        Returns:
            Unpacked results (see ``unpack_results``)
        """
        if not method.constant:
            raise MethodNotConstantError(method.name)
        args = collect_arguments(method.inputs)
        results = unpack_results(method.outputs, self.client.call(method, args))
        print(bold("returned:"))
        for index, (out, value) in enumerate(zip(method.outputs, results_as_list(method.outputs, results))):
            label = f"{out.type} {out.name}" if out.name else str(out.type)
            try:
                print(f"  ({label}) {decode(value, out.type)}")
            except ValueCodecError as e:
                print(error(f"  ({label}) can't render output {index}: {e.message}"))
        return results

    def transact(self, method: MethodDescriptor) -> Optional[str]:
        """
        Send a transaction to a mutating method.

        Returns:
            Transaction hash, or None when no signer is set
        """
        if method.constant:
            raise MethodConstantError(method.name)
        if self.signers.kind == SignerKind.NONE:
            print(error("signer not set"))
            print(f"use {info('signer/key')} or {info('signer/ledger')} to configure one")
            return None

        args = collect_arguments(method.inputs)

        value = None
        if method.payable and prompts.input_yes_no("method is payable. send amount with transaction?", False):
            value = self._input_wei("amount: ")

        gas_price = None
        if not prompts.input_yes_no("estimate gas price?", True):
            suggested = self.client.suggest_gas_price()
            gas_price = self._input_wei(f"gas price ({suggested}): ", default=suggested)
        gas_limit = None
        if not prompts.input_yes_no("estimate gas limit?", True):
            gas_limit = prompts.input_int_with_default("gas limit", 0) or None

        options = self.signers.signer.transact_options(self.chain_id())
        options.gas_price = gas_price
        options.gas_limit = gas_limit
        options.value = value

        tx_hash = self.client.send_transaction(method, args, options)
        print(f"{success('transaction sent:')} {tx_hash}")
        return tx_hash

    @staticmethod
    def _input_wei(prompt: str, default: Optional[int] = None) -> int:
        while True:
            text = prompts.input_text(prompt).strip()
            if text == prompts.ABORT_INPUT:
                raise AbortedError()
            if text == "":
                if default is not None:
                    return default
                continue
            try:
                value = int(text, 10)
            except ValueError:
                value = -1
            if value >= 0:
                return value
            print(error(f"invalid amount: {text}"))

    def list_events(self, event: EventDescriptor) -> int:
        """Print the already available logs of an event in a block range."""
        spec = build_filter(event.inputs)
        start_block = prompts.input_int_with_default("start block", 0)
        end_block = prompts.input_int_with_default("end block, -1 for the last", -1)
        records = self.client.filter_logs(
            event,
            spec.argument_filters(),
            start_block,
            end_block if end_block >= 0 else None,
        )
        count = list_events(records, lambda record: print(format_event(event, record)))
        print(dim(f"{count} events"))
        return count

    def watch_events(self, event: EventDescriptor) -> int:
        """Print new logs of an event until interrupted."""
        spec = build_filter(event.inputs)
        with interrupt_signal() as cancelled:
            subscription = self.client.watch_logs(
                event, spec.argument_filters(), self.settings.watch_poll_interval
            )
            print(dim("watching events, press Ctrl-C to stop"))
            count = watch_events(subscription, cancelled, lambda record: print(format_event(event, record)))
        print(dim(f"stopped watching, {count} events"))
        return count

    # Signer commands

    def show_signer(self) -> None:
        print(self.signers.signer.describe())

    def configure_key_signer(self) -> None:
        path = prompts.input_filename("key file: ")
        encrypted = prompts.input_yes_no("is the key encrypted?", True)
        password = prompts.input_password() if encrypted else ""
        account = read_key_file(path, encrypted, password)
        self.signers.replace(KeyedSigner(account))
        print(f"{success('signer set:')} {address(account.address)}")

    def configure_ledger_signer(self) -> None:
        wallets = self.hub_factory().wallets()
        if not wallets:
            print(error("no hardware wallets found"))
            return
        wallet = self._choose_wallet(wallets)

        current = self.signers.signer
        opened = False
        if current.kind == SignerKind.HARDWARE and current.wallet.url == wallet.url:
            wallet = current.wallet
        else:
            wallet.open()
            opened = True
        try:
            print(wallet.status())
            template = self._choose_derivation_path()
            account = self._choose_account(wallet, template)
        except BaseException:
            # Nothing replaced yet: release what this command acquired
            if opened:
                wallet.close()
            raise
        self.signers.replace(HardwareSigner(wallet, account))
        print(f"{success('signer set:')} {address(account.address)} ({account.path})")

    @staticmethod
    def _choose_wallet(wallets: Sequence[HardwareWallet]) -> HardwareWallet:
        if len(wallets) == 1:
            return wallets[0]
        urls = [w.url for w in wallets]
        choice = prompts.input_multi_choice("wallet", urls[0], urls)
        return wallets[urls.index(choice)]

    def _choose_derivation_path(self) -> str:
        templates = list(DERIVATION_PATH_TEMPLATES)
        if self.settings.derivation_path not in templates:
            templates.insert(0, self.settings.derivation_path)
        for template in templates:
            print(f"  {template}")
        print(f"  {CUSTOM_PATH_CHOICE}")
        default = self.settings.derivation_path
        choice = prompts.input_multi_choice(
            "derivation path", default, templates + [CUSTOM_PATH_CHOICE],
            prompts.print_choices_hint("x is replaced by the account index"),
        )
        if choice != CUSTOM_PATH_CHOICE:
            return choice
        template = prompts.input_text("derivation path (x is the account index): ").strip()
        if template in ("", prompts.ABORT_INPUT):
            raise AbortedError()
        expand_derivation_path(template, 0)
        return template

    @staticmethod
    def _choose_account(wallet: HardwareWallet, template: str) -> WalletAccount:
        start = 0
        while True:
            accounts = derive_accounts(wallet, template, start, ADDRESSES_PER_PAGE)
            choices = []
            for offset, account in enumerate(accounts):
                choices.append(str(start + offset))
                print(f"  {start + offset}: {address(account.address)} {dim(account.path)}")
            choice = prompts.input_multi_choice(
                "account", choices[0], choices + [MORE_CHOICE],
                prompts.print_choices_hint(f"pick an account index, or '{MORE_CHOICE}' for the next addresses"),
            )
            if choice == MORE_CHOICE:
                start += ADDRESSES_PER_PAGE
                continue
            return accounts[int(choice) - start]
