"""
DFU object transfer over a notification based BLE transport.

Streams a data object to a Secure DFU bootloader in MTU sized packets and
validates the device's receipt notifications against a locally computed
offset and CRC32.
"""
from .config import TransferConfig
from .constants import ControlPointOpcode, ResultCode
from .errors import (
    Aborted,
    CommandError,
    ConnectionLost,
    DFUError,
    ErrorCode,
    InvalidCrc,
    InvalidOffset,
    NotificationTimeout,
    UnexpectedNotification,
)
from .notification_queue import NotificationQueue
from .object_writer import ObjectWriter
from .packet_writer import PacketWriter, ProgressInfo
from .transport import BleakTransport, Notification

__all__ = [
    "Aborted",
    "BleakTransport",
    "CommandError",
    "ConnectionLost",
    "ControlPointOpcode",
    "DFUError",
    "ErrorCode",
    "InvalidCrc",
    "InvalidOffset",
    "Notification",
    "NotificationQueue",
    "NotificationTimeout",
    "ObjectWriter",
    "PacketWriter",
    "ProgressInfo",
    "ResultCode",
    "TransferConfig",
    "UnexpectedNotification",
]
