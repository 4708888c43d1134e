from __future__ import annotations

import zlib
from typing import Callable, List, Optional

import pytest

from dfu_transfer.constants import ControlPointOpcode, ResultCode
from dfu_transfer.transport import Notification

CTRL = "8ec90001-f315-4f60-9fb8-838830daea50"
DATA = "8ec90002-f315-4f60-9fb8-838830daea50"


def response(op_code: int, result: int = ResultCode.SUCCESS, payload: bytes = b"") -> bytes:
    return bytes([ControlPointOpcode.RESPONSE, op_code, result]) + payload


def crc_response(offset: int, crc: int) -> bytes:
    return response(
        ControlPointOpcode.CALCULATE_CRC,
        payload=offset.to_bytes(4, "little") + crc.to_bytes(4, "little"),
    )


class FakeTransport:
    """In-memory notification source and packet sink."""

    def __init__(self) -> None:
        self.subscribers: List[Callable[[Notification], None]] = []
        self.packets: List[bytes] = []
        self.on_write: Optional[Callable[["FakeTransport", bytes], None]] = None

    def subscribe(self, callback) -> None:
        self.subscribers.append(callback)

    def unsubscribe(self, callback) -> None:
        if callback in self.subscribers:
            self.subscribers.remove(callback)

    def notify(self, value: bytes, channel_id: str = CTRL) -> None:
        for callback in list(self.subscribers):
            callback(Notification(channel_id=channel_id, value=bytes(value)))

    async def write_data(self, data: bytes) -> None:
        self.packets.append(bytes(data))
        if self.on_write is not None:
            self.on_write(self, bytes(data))


class FakeDevice:
    """Answers every `prn` packets with its received offset/CRC32."""

    def __init__(self, prn: int, offset: int = 0, crc: int = 0) -> None:
        self.prn = prn
        self.offset = offset
        self.crc = crc
        self.count = 0

    def __call__(self, transport: FakeTransport, packet: bytes) -> None:
        self.offset += len(packet)
        self.crc = zlib.crc32(packet, self.crc) & 0xFFFFFFFF
        self.count += 1
        if self.prn and self.count % self.prn == 0:
            transport.notify(crc_response(self.offset, self.crc))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
