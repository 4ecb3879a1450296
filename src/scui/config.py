"""
Runtime settings for the console and the deploy tool.
"""

import os
from dataclasses import dataclass
from typing import Any, Optional

from scui.core.client import DEFAULT_RPC_URL
from scui.utils.exceptions import ConfigurationError
from scui.wallets import DEFAULT_DERIVATION_PATH

RPC_TIMEOUT_ENV = "SCUI_RPC_TIMEOUT"
WATCH_POLL_INTERVAL_ENV = "SCUI_WATCH_POLL_INTERVAL"


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigurationError(f"invalid value for {name}: {raw}", variable=name)
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive: {raw}", variable=name)
    return value


@dataclass
class Settings:
    rpc_url: str = DEFAULT_RPC_URL
    rpc_timeout: int = 30
    watch_poll_interval: float = 2.0  # seconds between live-log polls
    derivation_path: str = DEFAULT_DERIVATION_PATH
    debug: bool = False
    verbose: bool = False
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "Settings":
        """
        Defaults, overridden by SCUI_* environment variables, then by ``overrides``.

        Raises:
            ConfigurationError: If an environment variable holds a bad number
        """
        settings = cls(
            rpc_timeout=_env_number(RPC_TIMEOUT_ENV, cls.rpc_timeout, int),
            watch_poll_interval=_env_number(WATCH_POLL_INTERVAL_ENV, cls.watch_poll_interval, float),
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(settings, key, value)
        return settings

    @classmethod
    def from_args(cls, args) -> "Settings":
        """Build settings from an argparse namespace."""
        return cls.from_env(
            rpc_url=getattr(args, 'rpc_url', None),
            derivation_path=getattr(args, 'derivation_path', None),
            debug=getattr(args, 'debug', False),
            verbose=getattr(args, 'verbose', False),
            log_file=getattr(args, 'log_file', None),
        )
