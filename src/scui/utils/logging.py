"""
Logging configuration for scui.

Operator-facing output (prompts, call results, event lines) is printed to
stdout by the console. The ``scui`` logger carries diagnostics on stderr
so they never mix into piped results: RPC calls and signer changes at
DEBUG, polled log batches and web3's own request logs at TRACE.
"""

import logging
import os
import sys
from typing import List, Optional

from scui.utils.colors import Colors

# Below DEBUG: per-poll watch activity and web3 request/response logs
TRACE = 5
logging.addLevelName(TRACE, 'TRACE')

# Third-party loggers forwarded to the scui handlers in verbose mode
WEB3_LOGGERS = ('web3.providers', 'web3.manager')

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
# The watch loop polls from a worker thread, so file records name the thread
FILE_FORMAT = '%(asctime)s %(threadName)s %(name)s %(levelname)s: %(message)s'


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name of console records."""

    LEVEL_COLORS = {
        TRACE: Colors.DIM,
        logging.DEBUG: Colors.DIM,
        logging.INFO: Colors.BRIGHT_CYAN,
        logging.WARNING: Colors.BRIGHT_YELLOW,
        logging.ERROR: Colors.BRIGHT_RED,
        logging.CRITICAL: Colors.BOLD + Colors.BRIGHT_RED,
    }

    def __init__(self, fmt: str = CONSOLE_FORMAT, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno, '')
        # Work on a copy; the file handler formats the same record
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{Colors.RESET if color else ''}"
        return super().format(record)


class ScuiLogger(logging.Logger):
    """Logger with a ``trace`` method for the TRACE level."""

    def trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)


logging.setLoggerClass(ScuiLogger)

# Handlers of the last setup_logging call attached to the web3 loggers
_web3_handlers: List[logging.Handler] = []


def stderr_supports_color() -> bool:
    """Same rule as the stdout helpers in colors: a TTY and no NO_COLOR."""
    return (
        hasattr(sys.stderr, 'isatty')
        and sys.stderr.isatty()
        and 'NO_COLOR' not in os.environ
    )


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    debug: bool = False,
    verbose: bool = False,
    log_file: Optional[str] = None,
    quiet: bool = False,
) -> logging.Logger:
    """
    Configure the ``scui`` logger.

    Calling it again replaces (and closes) the handlers of the previous call.

    Args:
        debug: Log at DEBUG instead of WARNING
        verbose: Log at TRACE and forward web3's request logs
        log_file: Also append DEBUG and above to this file
        quiet: No console handler; only the log file receives records

    Returns:
        The ``scui`` logger
    """
    if verbose:
        level = TRACE
    elif debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logger = logging.getLogger('scui')
    _reset_handlers(logger)
    logger.propagate = False

    handlers: List[logging.Handler] = []
    if not quiet:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(level)
        console.setFormatter(ColoredFormatter(use_colors=stderr_supports_color()))
        handlers.append(console)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        handlers.append(file_handler)

    logger.setLevel(min(h.level for h in handlers) if handlers else level)
    for handler in handlers:
        logger.addHandler(handler)

    _forward_web3(handlers if verbose else [])
    return logger


def _forward_web3(handlers: List[logging.Handler]) -> None:
    for name in WEB3_LOGGERS:
        web3_logger = logging.getLogger(name)
        for handler in list(web3_logger.handlers):
            if handler in _web3_handlers:
                web3_logger.removeHandler(handler)
        for handler in handlers:
            web3_logger.addHandler(handler)
        if handlers:
            web3_logger.setLevel(logging.DEBUG)
    _web3_handlers[:] = handlers


def get_logger(name: str = None) -> logging.Logger:
    """
    Get the ``scui`` logger, or the child ``scui.<name>`` (e.g. ``scui.client``).
    """
    if name:
        return logging.getLogger(f'scui.{name}')
    return logging.getLogger('scui')


logger = get_logger()
