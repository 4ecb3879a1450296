"""
Common utilities for the CLI entry points.

Exit codes and the argument parser behavior shared by ``scui`` and
``scdeploy``.
"""

import argparse
import sys
from enum import IntEnum
from typing import NoReturn

from scui import __version__
from scui.utils.colors import error
from scui.utils.helpers import error_exit
from scui.utils.logging import setup_logging


class ConsoleExit(IntEnum):
    USAGE = -1
    DIAL = -2
    ABI = -3
    ADDRESS = -4


class DeployExit(IntEnum):
    USAGE = -1
    FLAGS = -2
    SIGNER = -3
    BYTECODE_READ = -4
    BYTECODE_PARSE = -5
    ABI = -6
    ARGUMENT_COUNT = -7
    ARGUMENT_ENCODING = -8
    DIAL = -10
    CHAIN_ID = -11
    DEPLOY = -12


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser exiting with a chosen code on bad flags."""

    def __init__(self, *args, error_code: int = -1, **kwargs):
        self.error_code = error_code
        super().__init__(*args, **kwargs)

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        print(error(f"{self.prog}: {message}"), file=sys.stderr)
        sys.exit(self.error_code)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--debug', action='store_true', help='Show debug logging')
    parser.add_argument('--verbose', action='store_true', help='Show trace logging (more detailed than --debug)')
    parser.add_argument('--log-file', help='Also write logs to this file')


def configure_logging(settings) -> None:
    setup_logging(debug=settings.debug, verbose=settings.verbose, log_file=settings.log_file)


def require_positionals(parser: argparse.ArgumentParser, args, names) -> None:
    """Exit with the usage code unless every named positional was given."""
    missing = [name for name in names if not getattr(args, name)]
    if missing:
        parser.print_usage(sys.stderr)
        error_exit(-1, f"missing arguments: {', '.join(missing)}")
