import argparse

import pytest

from scui.config import Settings
from scui.utils.exceptions import ConfigurationError
from scui.wallets import DEFAULT_DERIVATION_PATH


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("SCUI_RPC_TIMEOUT", raising=False)
    monkeypatch.delenv("SCUI_WATCH_POLL_INTERVAL", raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings.rpc_url == "http://localhost:8545"
    assert settings.rpc_timeout == 30
    assert settings.derivation_path == DEFAULT_DERIVATION_PATH
    assert not settings.debug


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SCUI_RPC_TIMEOUT", "5")
    monkeypatch.setenv("SCUI_WATCH_POLL_INTERVAL", "0.5")
    settings = Settings.from_env()
    assert settings.rpc_timeout == 5
    assert settings.watch_poll_interval == 0.5


@pytest.mark.parametrize("value", ["soon", "0", "-2"])
def test_bad_environment_values(monkeypatch, value):
    monkeypatch.setenv("SCUI_RPC_TIMEOUT", value)
    with pytest.raises(ConfigurationError):
        Settings.from_env()


def test_from_args():
    args = argparse.Namespace(
        rpc_url="http://node:8545",
        derivation_path=None,
        debug=True,
        verbose=False,
        log_file="scui.log",
    )
    settings = Settings.from_args(args)
    assert settings.rpc_url == "http://node:8545"
    assert settings.derivation_path == DEFAULT_DERIVATION_PATH
    assert settings.debug
    assert settings.log_file == "scui.log"
