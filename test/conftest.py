import hashlib
import os
import queue

# Plain output, whatever terminal the tests run in
os.environ.setdefault("NO_COLOR", "1")

import pytest
from eth_utils import to_checksum_address

from scui.core.schema import InterfaceSchema
from scui.core.signer import SignerSlot
from scui.dispatcher import ActionDispatcher
from scui.config import Settings
from scui.wallets import HardwareWallet, WalletAccount, WalletHub

ALICE = "0x" + "aa" * 20
BOB = "0x" + "bb" * 20

TOKEN_ABI = [
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "deposit",
        "stateMutability": "payable",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "info",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "name", "type": "string"},
            {"name": "decimals", "type": "uint8"},
        ],
    },
    {
        "type": "event",
        "name": "Transfer",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    },
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "name", "type": "string"},
            {"name": "supply", "type": "uint256"},
        ],
    },
]


class FakeSubscription:
    def __init__(self, records=(), errors=()):
        self.records = queue.Queue()
        self.errors = queue.Queue()
        for record in records:
            self.records.put(record)
        for failure in errors:
            self.errors.put(failure)
        self.unsubscribed = 0

    def unsubscribe(self):
        self.unsubscribed += 1


class FakeClient:
    """Stands in for ContractClient, recording what the console asks of the node."""

    def __init__(self, call_result=None, logs=(), subscription=None):
        self.call_result = call_result
        self.logs = list(logs)
        self.subscription = subscription or FakeSubscription()
        self.calls = []
        self.sent = []
        self.log_queries = []
        self.watches = []

    def chain_id(self):
        return 1

    def suggest_gas_price(self):
        return 10

    def call(self, method, args):
        self.calls.append((method.name, list(args)))
        return self.call_result

    def send_transaction(self, method, args, options):
        self.sent.append((method.name, list(args), options))
        return "0x" + "12" * 32

    def filter_logs(self, event, argument_filters, start_block=0, end_block=None):
        self.log_queries.append((event.name, argument_filters, start_block, end_block))
        return list(self.logs)

    def watch_logs(self, event, argument_filters, interval=2.0):
        self.watches.append((event.name, argument_filters, interval))
        return self.subscription


def derived_address(path):
    return to_checksum_address("0x" + hashlib.sha256(path.encode()).hexdigest()[:40])


class FakeWallet(HardwareWallet):
    def __init__(self, url="ledger://0", fail_derive=False):
        self._url = url
        self.fail_derive = fail_derive
        self.opened = 0
        self.closed = 0
        self.sign_requests = []

    @property
    def url(self):
        return self._url

    def open(self):
        self.opened += 1

    def close(self):
        self.closed += 1

    def status(self):
        return "fake wallet ready"

    def derive(self, path):
        if self.fail_derive:
            raise RuntimeError("device locked")
        return WalletAccount(address=derived_address(path), path=path)

    def sign_transaction(self, account, tx, chain_id):
        self.sign_requests.append((account, tx, chain_id))
        return b"\x01signed"


class FakeHub(WalletHub):
    def __init__(self, wallets):
        self._wallets = list(wallets)

    def wallets(self):
        return list(self._wallets)


class ScriptedInput:
    """Replacement for builtins.input answering from a fixed script."""

    def __init__(self):
        self.answers = []
        self.prompts = []

    def feed(self, *answers):
        self.answers.extend(answers)

    def __call__(self, prompt=""):
        self.prompts.append(prompt)
        if not self.answers:
            pytest.fail(f"unexpected prompt: {prompt!r}")
        return self.answers.pop(0)


@pytest.fixture
def scripted_input(monkeypatch):
    script = ScriptedInput()
    monkeypatch.setattr("builtins.input", script)
    return script


@pytest.fixture
def token_schema():
    return InterfaceSchema.from_abi(TOKEN_ABI)


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def signers():
    return SignerSlot()


@pytest.fixture
def dispatcher(fake_client, token_schema, signers):
    return ActionDispatcher(fake_client, token_schema, signers, Settings(watch_poll_interval=0.01))
