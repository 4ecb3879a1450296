#!/usr/bin/env python3
"""
Main entry point for scui

Parses the command line, loads the contract interface, connects to the node
and runs the interactive console.
"""

import sys

from scui.config import Settings
from scui.console import ContractConsole
from scui.core.client import ContractClient
from scui.core.schema import load_schema
from scui.core.signer import SignerSlot
from scui.dispatcher import ActionDispatcher
from scui.menu import build_tree
from scui.utils.exceptions import ScuiError, format_exception_message
from scui.utils.helpers import error_exit, normalize_address
from scui.utils.logging import logger
from .common import (
    ArgumentParser,
    ConsoleExit,
    add_common_arguments,
    configure_logging,
    require_positionals,
)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog='scui',
        description='scui - interactive console for a deployed smart contract',
        error_code=ConsoleExit.USAGE,
    )
    parser.add_argument('rpc_url', nargs='?', help='Node RPC URL, e.g. http://localhost:8545')
    parser.add_argument('contract_address', nargs='?', help='Contract address (0x...)')
    parser.add_argument('abi_file', nargs='?', help='Contract ABI (JSON array or artifact with an "abi" key)')
    add_common_arguments(parser)
    return parser


def main(argv=None) -> int:
    """Main entry point for the scui console."""
    parser = build_parser()
    args = parser.parse_args(argv)
    require_positionals(parser, args, ('rpc_url', 'contract_address', 'abi_file'))

    try:
        settings = Settings.from_args(args)
    except ScuiError as e:
        error_exit(ConsoleExit.USAGE, e.message)
    configure_logging(settings)

    try:
        contract_address = normalize_address(args.contract_address)
    except ValueError as e:
        error_exit(ConsoleExit.ADDRESS, f"invalid contract address: {e}")

    try:
        schema = load_schema(args.abi_file)
    except ScuiError as e:
        error_exit(ConsoleExit.ABI, e.message)

    try:
        client = ContractClient.dial(settings.rpc_url, contract_address, settings.rpc_timeout)
    except ScuiError as e:
        error_exit(ConsoleExit.DIAL, e.message)

    logger.debug(
        f"Loaded {len(schema.methods)} methods and {len(schema.events)} events for {contract_address}"
    )

    signers = SignerSlot()
    dispatcher = ActionDispatcher(client, schema, signers, settings)
    console = ContractConsole(build_tree(schema, dispatcher.command_menus), dispatcher)
    try:
        console.run()
    finally:
        try:
            signers.close()
        except Exception as e:
            logger.warning(f"Error closing signer: {format_exception_message(e)}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
