"""
Secure DFU control-point constants.

Opcodes and result codes follow the Nordic Secure DFU control point. Only the
opcodes are listed here; building the commands themselves is left to the
command layer that drives the object writer.
"""
from __future__ import annotations

from enum import IntEnum


class ControlPointOpcode(IntEnum):
    CREATE = 0x01
    SET_PRN = 0x02
    CALCULATE_CRC = 0x03
    EXECUTE = 0x04
    SELECT = 0x06
    RESPONSE = 0x60


class ResultCode(IntEnum):
    INVALID_CODE = 0x00
    SUCCESS = 0x01
    OPCODE_NOT_SUPPORTED = 0x02
    INVALID_PARAMETER = 0x03
    INSUFFICIENT_RESOURCES = 0x04
    INVALID_OBJECT = 0x05
    UNSUPPORTED_TYPE = 0x07
    OPERATION_NOT_PERMITTED = 0x08
    OPERATION_FAILED = 0x0A
    EXTENDED_ERROR = 0x0B


# ----------------------------
# Defaults
# ----------------------------
DEFAULT_MTU_SIZE = 20
DEFAULT_PRN = 0
MAX_MTU_SIZE = 4096
MAX_PRN = 65535

NOTIFICATION_TIMEOUT_S = 20.0
NOTIFICATION_POLL_INTERVAL_S = 0.02

# Response layout: [marker, opcode, result, offset(4), crc32(4)]
RESPONSE_OPCODE_POS = 1
RESPONSE_RESULT_POS = 2
CRC_OFFSET_SLICE = slice(3, 7)
CRC_VALUE_SLICE = slice(7, 11)
