"""
Contract Client

Thin web3.py wrapper exposing what the console needs from a node: constant
calls, signed transactions, gas price suggestions, historical logs and a
polling live-log subscription.
"""

import queue
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from eth_utils import to_hex
from web3 import Web3

from scui.utils.colors import bullet_point, error
from scui.utils.exceptions import RPCConnectionError, TransactionError
from scui.utils.logging import get_logger
from .schema import EventDescriptor, InterfaceSchema, MethodDescriptor
from .signer import TransactionOptions

logger = get_logger('client')

DEFAULT_RPC_URL = "http://localhost:8545"


class LogSubscription:
    """
    Live log feed backed by a polling thread.

    ``records`` receives each new log entry, ``errors`` the exception that
    stopped the poller. ``unsubscribe`` stops polling and runs the cleanup
    callback once.
    """

    def __init__(self, poll: Callable[[], Iterable[Any]], interval: float,
                 cleanup: Optional[Callable[[], None]] = None):
        self.records: "queue.Queue[Any]" = queue.Queue()
        self.errors: "queue.Queue[BaseException]" = queue.Queue()
        self._poll = poll
        self._interval = interval
        self._cleanup = cleanup
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name="log-subscription", daemon=True)

    def start(self) -> "LogSubscription":
        self._thread.start()
        return self

    def _run(self) -> None:
        while not self._stopped.is_set():
            try:
                entries = list(self._poll())
                logger.trace(f"Polled {len(entries)} log entries")
                for entry in entries:
                    self.records.put(entry)
            except Exception as e:
                logger.debug(f"Log subscription failed: {e}")
                self.errors.put(e)
                return
            self._stopped.wait(self._interval)

    def unsubscribe(self) -> None:
        if self._stopped.is_set():
            return
        self._stopped.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=self._interval + 1)
        if self._cleanup:
            try:
                self._cleanup()
            except Exception as e:
                logger.debug(f"Error removing log filter: {e}")


class ContractClient:
    """
    Node access for one deployed contract.
    """

    def __init__(self, w3: Web3, address: Optional[str] = None, rpc_url: str = DEFAULT_RPC_URL):
        self.w3 = w3
        self.address = address
        self.rpc_url = rpc_url

    @classmethod
    def dial(cls, rpc_url: str = DEFAULT_RPC_URL, address: Optional[str] = None,
             timeout: int = 30) -> "ContractClient":
        """
        Connect to a node.

        Raises:
            RPCConnectionError: If the node doesn't answer
        """
        logger.debug(f"Connecting to RPC: {rpc_url}")
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        try:
            # A real request instead of is_connected() to surface the error
            w3.eth.block_number
        except Exception as e:
            raise RPCConnectionError(
                f"{error('Failed to connect to')} {error(rpc_url)}\n"
                f"{bullet_point('Please check if the RPC endpoint is running and accessible')}\n"
                f"{bullet_point(f'Error: {e}')}",
                rpc_url=rpc_url,
            )
        return cls(w3, address, rpc_url)

    def chain_id(self) -> int:
        return self.w3.eth.chain_id

    def suggest_gas_price(self) -> int:
        return self.w3.eth.gas_price

    def _contract(self, abi_entry: Dict[str, Any]):
        # Binding a single ABI entry keeps overloaded names unambiguous
        return self.w3.eth.contract(address=self.address, abi=[abi_entry])

    def _function(self, method: MethodDescriptor, args: Sequence[Any]):
        contract = self._contract(method.abi)
        return getattr(contract.functions, method.abi_name)(*args)

    def _event(self, event: EventDescriptor):
        contract = self._contract(event.abi)
        return getattr(contract.events, event.abi_name)()

    def call(self, method: MethodDescriptor, args: Sequence[Any]) -> Any:
        """Execute a constant call against the latest block."""
        logger.debug(f"eth_call {method.signature} on {self.address}")
        return self._function(method, args).call()

    def _fill_transaction(self, params: Dict[str, Any], options: TransactionOptions) -> Dict[str, Any]:
        params.update({
            "from": options.from_address,
            "chainId": options.chain_id,
            "nonce": self.w3.eth.get_transaction_count(options.from_address, "pending"),
            "gasPrice": options.gas_price if options.gas_price is not None else self.suggest_gas_price(),
        })
        if options.value:
            params["value"] = options.value
        if options.gas_limit:
            params["gas"] = options.gas_limit
        return params

    def _sign_and_send(self, tx: Dict[str, Any], options: TransactionOptions) -> str:
        raw = options.sign(options.from_address, tx)
        tx_hash = to_hex(self.w3.eth.send_raw_transaction(raw))
        logger.debug(f"Sent transaction {tx_hash}")
        return tx_hash

    def send_transaction(self, method: MethodDescriptor, args: Sequence[Any],
                         options: TransactionOptions) -> str:
        """
        Build, sign and submit a transaction to a method.

        Gas is estimated by the node when ``options.gas_limit`` is unset.

        Returns:
            Transaction hash (0x hex)
        """
        logger.debug(f"Transaction to {method.signature} on {self.address} from {options.from_address}")
        tx = self._function(method, args).build_transaction(self._fill_transaction({}, options))
        return self._sign_and_send(tx, options)

    def deploy(self, schema: InterfaceSchema, bytecode: bytes, args: Sequence[Any],
               options: TransactionOptions, timeout: int = 120) -> Dict[str, str]:
        """
        Deploy a contract and wait for it to be mined.

        Returns:
            dict with ``address`` and ``tx_hash``
        """
        contract = self.w3.eth.contract(abi=schema.abi, bytecode=bytecode)
        tx = contract.constructor(*args).build_transaction(self._fill_transaction({}, options))
        tx_hash = self._sign_and_send(tx, options)
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        if receipt.get("status") == 0 or not receipt.get("contractAddress"):
            raise TransactionError("deployment transaction failed", tx_hash=tx_hash)
        return {"address": receipt["contractAddress"], "tx_hash": tx_hash}

    def filter_logs(self, event: EventDescriptor, argument_filters: Dict[str, Any],
                    start_block: int = 0, end_block: Optional[int] = None) -> List[Any]:
        """Fetch the already available logs of an event in a block range."""
        logger.debug(
            f"eth_getLogs {event.signature} blocks {start_block}..{end_block if end_block is not None else 'latest'}"
        )
        return list(self._event(event).get_logs(
            argument_filters=argument_filters or None,
            from_block=start_block,
            to_block=end_block if end_block is not None else "latest",
        ))

    def watch_logs(self, event: EventDescriptor, argument_filters: Dict[str, Any],
                   interval: float = 2.0) -> LogSubscription:
        """Subscribe to new logs of an event."""
        log_filter = self._event(event).create_filter(
            from_block="latest",
            argument_filters=argument_filters or None,
        )
        logger.debug(f"Installed log filter {log_filter.filter_id} for {event.signature}")
        return LogSubscription(
            poll=log_filter.get_new_entries,
            interval=interval,
            cleanup=lambda: self.w3.eth.uninstall_filter(log_filter.filter_id),
        ).start()
