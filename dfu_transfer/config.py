"""
Transfer configuration.

Defaults match the values a Secure DFU bootloader expects out of the box:
20 byte packets (default ATT MTU minus header), no packet receipt
notifications, 20 s response timeout polled every 20 ms.

Environment overrides (read by TransferConfig.from_env):
    DFU_MTU_SIZE, DFU_PRN, DFU_NOTIFICATION_TIMEOUT, DFU_POLL_INTERVAL
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .constants import (
    DEFAULT_MTU_SIZE,
    DEFAULT_PRN,
    MAX_MTU_SIZE,
    MAX_PRN,
    NOTIFICATION_POLL_INTERVAL_S,
    NOTIFICATION_TIMEOUT_S,
)


def check_mtu_size(mtu_size: int) -> int:
    if mtu_size <= 0 or mtu_size > MAX_MTU_SIZE:
        raise ValueError(f"mtu_size must be between 1 and {MAX_MTU_SIZE}, got {mtu_size}")
    return mtu_size


def check_prn(prn: int) -> int:
    if prn < 0 or prn > MAX_PRN:
        raise ValueError(f"prn must be between 0 and {MAX_PRN}, got {prn}")
    return prn


@dataclass
class TransferConfig:
    mtu_size: int = DEFAULT_MTU_SIZE
    prn: int = DEFAULT_PRN
    notification_timeout: float = NOTIFICATION_TIMEOUT_S
    poll_interval: float = NOTIFICATION_POLL_INTERVAL_S

    def validate(self) -> "TransferConfig":
        check_mtu_size(self.mtu_size)
        check_prn(self.prn)
        if self.notification_timeout <= 0:
            raise ValueError("notification_timeout must be > 0")
        if self.poll_interval < 0:
            raise ValueError("poll_interval must be >= 0")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TransferConfig":
        env = os.environ if environ is None else environ
        config = cls()
        overrides = {}
        if env.get("DFU_MTU_SIZE", "").strip():
            overrides["mtu_size"] = int(env["DFU_MTU_SIZE"])
        if env.get("DFU_PRN", "").strip():
            overrides["prn"] = int(env["DFU_PRN"])
        if env.get("DFU_NOTIFICATION_TIMEOUT", "").strip():
            overrides["notification_timeout"] = float(env["DFU_NOTIFICATION_TIMEOUT"])
        if env.get("DFU_POLL_INTERVAL", "").strip():
            overrides["poll_interval"] = float(env["DFU_POLL_INTERVAL"])
        return replace(config, **overrides).validate()
