from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .log import IndentLogger
from .transport import PacketSink
from .util import crc32


@dataclass(frozen=True)
class ProgressInfo:
    offset: int
    crc32: int


class PacketWriter:
    """
    Writes packets to the data characteristic and keeps the running
    offset/CRC32 of everything written so far.

    Every `prn` packets, write_packet() returns the expected ProgressInfo so
    the caller can compare it with the device's receipt notification.
    """

    def __init__(self, sink: PacketSink, logger: Optional[IndentLogger] = None) -> None:
        self._sink = sink
        self._offset = 0
        self._crc32 = 0
        self._prn = 0
        self._prn_count = 0
        self._log = logger or IndentLogger(logging.getLogger(self.__class__.__name__))

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def crc32(self) -> int:
        return self._crc32

    def set_offset(self, offset: Optional[int]) -> None:
        self._offset = offset or 0

    def set_crc32(self, value: Optional[int]) -> None:
        self._crc32 = value or 0

    def set_prn(self, prn: Optional[int]) -> None:
        self._prn = prn or 0
        self._prn_count = 0

    async def write_packet(self, packet: bytes) -> Optional[ProgressInfo]:
        await self._sink.write_data(packet)
        self._offset += len(packet)
        self._crc32 = crc32(packet, self._crc32)
        self._log.debug("Wrote %d bytes, offset=%d crc=0x%08X", len(packet), self._offset, self._crc32)

        if self._prn <= 0:
            return None
        self._prn_count += 1
        if self._prn_count < self._prn:
            return None
        self._prn_count = 0
        return ProgressInfo(offset=self._offset, crc32=self._crc32)
