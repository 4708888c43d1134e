from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List, Optional

from .config import TransferConfig, check_mtu_size, check_prn
from .constants import CRC_OFFSET_SLICE, CRC_VALUE_SLICE, ControlPointOpcode
from .errors import Aborted, InvalidCrc, InvalidOffset
from .log import IndentLogger
from .notification_queue import NotificationQueue
from .packet_writer import PacketWriter, ProgressInfo
from .util import bytes_to_int, split_packets

ProgressCallback = Callable[[ProgressInfo], None]


class ObjectWriter:
    """
    Streams one DFU data object to the device.

    The object is cut into `mtu_size` packets and written in order. Whenever
    the packet writer reaches the PRN cadence, the CALCULATE_CRC receipt from
    the device is read and checked against the locally computed offset and
    CRC32 before the next packet goes out.
    """

    def __init__(
            self,
            transport: Any,
            control_channel_id: Any,
            config: Optional[TransferConfig] = None,
            logger_obj: Optional[logging.Logger] = None,
    ) -> None:
        self._config = (config or TransferConfig()).validate()
        self._transport = transport
        self._mtu_size: int = self._config.mtu_size
        self._prn: int = self._config.prn
        self._abort_event = threading.Event()
        self.log = IndentLogger(logger_obj or logging.getLogger(self.__class__.__name__))
        self.notification_queue = NotificationQueue(
            transport,
            control_channel_id,
            timeout=self._config.notification_timeout,
            poll_interval=self._config.poll_interval,
            logger=self.log,
        )

    @property
    def mtu_size(self) -> int:
        return self._mtu_size

    @property
    def prn(self) -> int:
        return self._prn

    @property
    def aborted(self) -> bool:
        return self._abort_event.is_set()

    def set_mtu_size(self, mtu_size: int) -> None:
        """Packet size used by the next write_object() call. Default is 20."""
        self._mtu_size = check_mtu_size(mtu_size)

    def set_prn(self, prn: int) -> None:
        """Packets between receipt notifications; 0 disables them."""
        self._prn = check_prn(prn)

    def abort(self) -> None:
        """
        Stop before the next packet is written. The running write_object()
        then fails with Aborted. A packet already being written is not
        interrupted.
        """
        self._abort_event.set()

    async def write_object(
            self,
            data: bytes,
            offset: Optional[int] = None,
            crc32: Optional[int] = None,
            progress_callback: Optional[ProgressCallback] = None,
    ) -> ProgressInfo:
        """
        Write `data` to the device, continuing from `offset`/`crc32` when
        resuming a partially transferred object.

        Returns the final offset and CRC32, which the caller may persist as a
        resume point.
        """
        packets = split_packets(data, self._mtu_size)
        packet_writer = self._create_packet_writer(offset, crc32)
        with self.log.step(
            "Writing object: %d bytes in %d packet(s), mtu=%d prn=%d start offset=%d",
            len(data), len(packets), self._mtu_size, self._prn, packet_writer.offset,
        ):
            self.notification_queue.start_listening()
            try:
                await self._write_packets(packet_writer, packets, progress_callback)
            finally:
                self.notification_queue.stop_listening()

        self.log.debug("✓ Object written: offset=%d crc=0x%08X", packet_writer.offset, packet_writer.crc32)
        return ProgressInfo(offset=packet_writer.offset, crc32=packet_writer.crc32)

    def _create_packet_writer(self, offset: Optional[int], crc32: Optional[int]) -> PacketWriter:
        writer = PacketWriter(self._transport, logger=self.log)
        writer.set_offset(offset)
        writer.set_crc32(crc32)
        writer.set_prn(self._prn)
        return writer

    async def _write_packets(
            self,
            packet_writer: PacketWriter,
            packets: List[bytes],
            progress_callback: Optional[ProgressCallback],
    ) -> None:
        for packet in packets:
            self._check_abort_state()
            progress = await packet_writer.write_packet(packet)
            if progress is None:
                continue
            await self._validate_progress(progress)
            if progress_callback is not None:
                progress_callback(progress)

    def _check_abort_state(self) -> None:
        if self._abort_event.is_set():
            self.log.warning("Abort requested, stopping transfer")
            raise Aborted("Abort was triggered.")

    async def _validate_progress(self, progress: ProgressInfo) -> None:
        response = await self.notification_queue.read_next(ControlPointOpcode.CALCULATE_CRC)
        self._validate_offset(response, progress.offset)
        self._validate_crc32(response, progress.crc32)
        self.log.debug("CRC ok @ %d bytes (crc=0x%08X)", progress.offset, progress.crc32)

    def _validate_offset(self, response: bytes, offset: int) -> None:
        response_offset = bytes_to_int(response[CRC_OFFSET_SLICE])
        if response_offset != offset:
            raise InvalidOffset(
                f"Error when validating offset. Got {response_offset}, but expected {offset}.",
                expected=offset,
                actual=response_offset,
            )

    def _validate_crc32(self, response: bytes, crc32: int) -> None:
        response_crc = bytes_to_int(response[CRC_VALUE_SLICE])
        if response_crc != crc32:
            raise InvalidCrc(
                f"Error when validating CRC. Got 0x{response_crc:08X}, but expected 0x{crc32:08X}.",
                expected=crc32,
                actual=response_crc,
            )
