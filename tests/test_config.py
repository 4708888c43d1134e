from __future__ import annotations

import pytest

from dfu_transfer.config import TransferConfig


def test_defaults():
    config = TransferConfig()
    assert config.mtu_size == 20
    assert config.prn == 0
    assert config.notification_timeout == 20.0
    assert config.poll_interval == 0.02


def test_from_env_overrides():
    config = TransferConfig.from_env({
        "DFU_MTU_SIZE": "244",
        "DFU_PRN": "12",
        "DFU_NOTIFICATION_TIMEOUT": "5",
        "DFU_POLL_INTERVAL": "0.01",
    })
    assert config == TransferConfig(mtu_size=244, prn=12, notification_timeout=5.0, poll_interval=0.01)


def test_from_env_ignores_blank_values():
    assert TransferConfig.from_env({"DFU_PRN": " "}) == TransferConfig()


def test_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv("DFU_MTU_SIZE", "100")
    assert TransferConfig.from_env().mtu_size == 100


@pytest.mark.parametrize("env", [
    {"DFU_MTU_SIZE": "0"},
    {"DFU_PRN": "70000"},
    {"DFU_NOTIFICATION_TIMEOUT": "0"},
    {"DFU_POLL_INTERVAL": "-1"},
])
def test_from_env_rejects_out_of_range(env):
    with pytest.raises(ValueError):
        TransferConfig.from_env(env)
