"""Errors raised while transferring a DFU object."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    GENERIC = "GENERIC"
    NOTIFICATION_TIMEOUT = "NOTIFICATION_TIMEOUT"
    UNEXPECTED_NOTIFICATION = "UNEXPECTED_NOTIFICATION"
    COMMAND_ERROR = "COMMAND_ERROR"
    ABORTED = "ABORTED"
    INVALID_OFFSET = "INVALID_OFFSET"
    INVALID_CRC = "INVALID_CRC"
    CONNECTION_LOST = "CONNECTION_LOST"


class DFUError(RuntimeError):
    code = ErrorCode.GENERIC


class NotificationTimeout(DFUError):
    """No matching response arrived before the deadline."""
    code = ErrorCode.NOTIFICATION_TIMEOUT


class UnexpectedNotification(DFUError):
    """The device answered a different operation than the one awaited."""
    code = ErrorCode.UNEXPECTED_NOTIFICATION


class CommandError(DFUError):
    code = ErrorCode.COMMAND_ERROR

    def __init__(self, message: str, result_code: Optional[int]) -> None:
        super().__init__(message)
        self.result_code = result_code


class Aborted(DFUError):
    code = ErrorCode.ABORTED


class _ProgressMismatch(DFUError):
    def __init__(self, message: str, expected: int, actual: int) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InvalidOffset(_ProgressMismatch):
    code = ErrorCode.INVALID_OFFSET


class InvalidCrc(_ProgressMismatch):
    code = ErrorCode.INVALID_CRC


class ConnectionLost(DFUError):
    code = ErrorCode.CONNECTION_LOST
