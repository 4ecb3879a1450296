#!/usr/bin/env python3
"""
Deploy entry point (scdeploy)

Deploys a contract from its bytecode and ABI, signing with a key file or a
Ledger, and prints the new contract address.

    scdeploy <node_url> <bytecode_file> <abi_file> <signer_flags> [gas_flags] [--] [constructor_args]
"""

import sys
from typing import Any, List, Optional

from eth_utils import decode_hex, is_hex, remove_0x_prefix

from scui.config import Settings
from scui.core.client import ContractClient
from scui.core.codec import encode
from scui.core.schema import InterfaceSchema, load_schema
from scui.core.signer import HardwareSigner, KeyedSigner, Signer
from scui.keys import prompt_password, read_key_file
from scui.utils.colors import address, dim, success
from scui.utils.exceptions import (
    ConfigurationError,
    HardwareWalletError,
    InvalidAmountError,
    MutuallyExclusiveArgumentsError,
    ScuiError,
    SignerArgumentsMissingError,
    format_exception_message,
)
from scui.utils.helpers import error_exit, parse_wei
from scui.utils.logging import logger
from scui.wallets import LedgerHub, WalletHub, expand_derivation_path, find_account
from .common import (
    ArgumentParser,
    DeployExit,
    add_common_arguments,
    configure_logging,
    require_positionals,
)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog='scdeploy',
        description='scdeploy - deploy a smart contract',
        epilog='Constructor arguments follow the positionals; put them after -- when one starts with "-".',
        error_code=DeployExit.FLAGS,
    )
    parser.add_argument('rpc_url', nargs='?', help='Node RPC URL, e.g. http://localhost:8545')
    parser.add_argument('bytecode_file', nargs='?', help='File with the contract bytecode (hex)')
    parser.add_argument('abi_file', nargs='?', help='Contract ABI (JSON array or artifact with an "abi" key)')
    parser.add_argument('constructor_args', nargs='*', help='Constructor arguments')

    signer = parser.add_argument_group('signer')
    signer.add_argument('-k', dest='key_file', help='Sign with a raw (hex) private key file')
    signer.add_argument('-e', dest='encrypted_key_file', help='Sign with an encrypted (keystore JSON) key file')
    signer.add_argument('-P', dest='password', help='Password of the encrypted key file (prompted when omitted)')
    signer.add_argument('-w', dest='ledger', action='store_true', help='Sign with a Ledger hardware wallet')
    signer.add_argument('-d', dest='derivation_path', help="Ledger derivation path, x is the account index (default: m/44'/60'/x'/0/0)")
    signer.add_argument('-a', dest='ledger_address', help='Ledger address to look for among the first derived accounts')

    gas = parser.add_argument_group('gas and value')
    gas.add_argument('-p', dest='gas_price', default='0', help='Gas price in wei (0: network suggested)')
    gas.add_argument('-l', dest='gas_limit', default='0', help='Gas limit (0: estimate)')
    gas.add_argument('-v', dest='value', default='0', help='Value to send with the deployment, in wei')

    add_common_arguments(parser)
    return parser


def check_signer_flags(args) -> None:
    """
    Raises:
        ConfigurationError: On conflicting or missing signer flags
    """
    if args.key_file and args.encrypted_key_file:
        raise MutuallyExclusiveArgumentsError('-k', '-e')
    if args.ledger:
        for flag, value in (('-k', args.key_file), ('-e', args.encrypted_key_file), ('-P', args.password)):
            if value:
                raise MutuallyExclusiveArgumentsError('-w', flag)
    elif not (args.key_file or args.encrypted_key_file):
        raise SignerArgumentsMissingError()


def parse_amounts(args) -> tuple:
    """Return (gas_price, gas_limit, value), each None when zero. Raises InvalidAmountError."""
    amounts = []
    for what, text in (('gas price', args.gas_price), ('gas limit', args.gas_limit), ('value', args.value)):
        try:
            amounts.append(parse_wei(text, what) or None)
        except ValueError:
            raise InvalidAmountError(what, text)
    return tuple(amounts)


def read_bytecode(path: str) -> str:
    with open(path, 'r') as f:
        return f.read()


def parse_bytecode(text: str) -> bytes:
    """Raises ValueError if the text is not non-empty hex."""
    code = text.strip()
    if not code or not is_hex(code) or len(remove_0x_prefix(code)) % 2:
        raise ValueError("bytecode is not hex encoded")
    return decode_hex(code)


def encode_constructor_args(schema: InterfaceSchema, texts: List[str]) -> List[Any]:
    inputs = schema.constructor.inputs if schema.constructor else ()
    if len(texts) != len(inputs):
        error_exit(
            DeployExit.ARGUMENT_COUNT,
            f"constructor takes {len(inputs)} arguments, {len(texts)} given",
        )
    values = []
    for index, (arg, text) in enumerate(zip(inputs, texts)):
        try:
            values.append(encode(text, arg.type))
        except ScuiError as e:
            error_exit(
                DeployExit.ARGUMENT_ENCODING,
                f"can't encode argument {index} ({arg}): {e.message}",
            )
    return values


def create_signer(args, settings: Settings, hub: Optional[WalletHub] = None) -> Signer:
    """
    Build the signer selected by the flags.

    Raises:
        ScuiError: If the key can't be loaded or the wallet can't provide the account
    """
    if not args.ledger:
        if args.key_file:
            return KeyedSigner(read_key_file(args.key_file, False))
        password = args.password if args.password is not None else prompt_password()
        return KeyedSigner(read_key_file(args.encrypted_key_file, True, password))

    wallets = (hub or LedgerHub()).wallets()
    if not wallets:
        raise HardwareWalletError("no hardware wallets found")
    wallet = wallets[0]
    wallet.open()
    try:
        template = settings.derivation_path
        if args.ledger_address:
            account = find_account(wallet, template, args.ledger_address)
        else:
            account = wallet.derive(expand_derivation_path(template, 0))
    except BaseException:
        wallet.close()
        raise
    return HardwareSigner(wallet, account)


def parse_arguments(parser: ArgumentParser, argv: List[str]):
    """Parse flags and positionals in any order; everything after -- is a constructor argument."""
    trailing: List[str] = []
    if '--' in argv:
        split = argv.index('--')
        argv, trailing = argv[:split], argv[split + 1:]
    args = parser.parse_intermixed_args(argv)
    args.constructor_args = list(args.constructor_args or []) + trailing
    return args


def main(argv=None) -> int:
    """Main entry point for scdeploy."""
    parser = build_parser()
    args = parse_arguments(parser, sys.argv[1:] if argv is None else list(argv))
    require_positionals(parser, args, ('rpc_url', 'bytecode_file', 'abi_file'))

    try:
        settings = Settings.from_args(args)
    except ConfigurationError as e:
        error_exit(DeployExit.FLAGS, e.message)
    try:
        check_signer_flags(args)
        gas_price, gas_limit, value = parse_amounts(args)
    except ConfigurationError as e:
        error_exit(DeployExit.SIGNER, e.message)
    configure_logging(settings)

    try:
        bytecode_text = read_bytecode(args.bytecode_file)
    except OSError as e:
        error_exit(DeployExit.BYTECODE_READ, f"can't read bytecode: {e}")
    try:
        bytecode = parse_bytecode(bytecode_text)
    except ValueError as e:
        error_exit(DeployExit.BYTECODE_PARSE, f"can't parse bytecode: {e}")

    try:
        schema = load_schema(args.abi_file)
    except ScuiError as e:
        error_exit(DeployExit.ABI, e.message)

    constructor_args = encode_constructor_args(schema, args.constructor_args)

    try:
        signer = create_signer(args, settings)
    except ScuiError as e:
        error_exit(DeployExit.SIGNER, e.message)

    try:
        try:
            client = ContractClient.dial(settings.rpc_url, timeout=settings.rpc_timeout)
        except ScuiError as e:
            error_exit(DeployExit.DIAL, e.message)

        try:
            chain_id = client.chain_id()
        except Exception as e:
            error_exit(DeployExit.CHAIN_ID, f"can't get chain id: {format_exception_message(e)}")

        options = signer.transact_options(chain_id)
        options.gas_price = gas_price
        options.gas_limit = gas_limit
        options.value = value
        logger.debug(f"Deploying {len(bytecode)} bytes from {options.from_address} on chain {chain_id}")

        try:
            result = client.deploy(schema, bytecode, constructor_args, options)
        except Exception as e:
            error_exit(DeployExit.DEPLOY, f"can't deploy contract: {format_exception_message(e)}")
    finally:
        signer.close()

    print(f"{success('contract deployed:')} {address(result['address'])}")
    print(dim(f"transaction: {result['tx_hash']}"))
    return 0


if __name__ == '__main__':
    sys.exit(main())
