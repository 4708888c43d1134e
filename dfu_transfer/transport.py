from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from bleak import BleakClient
from bleak.exc import BleakError
from bleak.backends.characteristic import BleakGATTCharacteristic

from .errors import ConnectionLost
from .log import IndentLogger

DFU_CTRL_UUID = "8ec90001-f315-4f60-9fb8-838830daea50"
DFU_DATA_UUID = "8ec90002-f315-4f60-9fb8-838830daea50"


@dataclass(frozen=True)
class Notification:
    channel_id: Any
    value: bytes


NotificationCallback = Callable[[Notification], None]


class NotificationSource(Protocol):
    def subscribe(self, callback: NotificationCallback) -> None: ...

    def unsubscribe(self, callback: NotificationCallback) -> None: ...


class PacketSink(Protocol):
    async def write_data(self, data: bytes) -> None: ...


class BleakTransport:
    """
    Exposes a connected BleakClient as a notification source and packet sink.

    Connecting, service discovery and MTU negotiation belong to the caller;
    this class only manages the control point notifications and writes to
    the data characteristic.

    Thread Safety:
    - _on_notification() is invoked by Bleak, possibly on a background thread
    - It uses call_soon_threadsafe() to hand each notification to the asyncio loop
    - Subscribers are therefore always called on the loop thread
    """

    def __init__(
            self,
            client: BleakClient,
            ctrl_uuid: str = DFU_CTRL_UUID,
            data_uuid: str = DFU_DATA_UUID,
            loop: Optional[asyncio.AbstractEventLoop] = None,
            logger: Optional[IndentLogger] = None,
    ) -> None:
        self.ctrl_uuid: str = ctrl_uuid
        self.data_uuid: str = data_uuid
        self._client: BleakClient = client
        self._loop: Optional[asyncio.AbstractEventLoop] = loop
        self._subscribers: List[NotificationCallback] = []
        self._notifying: bool = False
        self._logger: IndentLogger = logger or IndentLogger(logging.getLogger("BleakTransport"))

    @property
    def control_channel_id(self) -> str:
        return self.ctrl_uuid.lower()

    async def start(self) -> None:
        """Enable notifications on the control point characteristic."""
        if self._notifying:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        try:
            await self._client.start_notify(self.ctrl_uuid, self._on_notification)
        except BleakError as e:
            raise ConnectionLost(f"Failed to enable notifications: {e}") from e
        self._notifying = True

    async def stop(self) -> None:
        if not self._notifying:
            return
        self._notifying = False
        if not self._client.is_connected:
            return
        try:
            await asyncio.wait_for(self._client.stop_notify(self.ctrl_uuid), timeout=0.5)
        except (asyncio.TimeoutError, BleakError):
            self._logger.debug("stop_notify failed (ignored)")

    def subscribe(self, callback: NotificationCallback) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: NotificationCallback) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    async def write_data(self, data: bytes) -> None:
        if not self._client.is_connected:
            raise ConnectionLost("Not connected")
        try:
            await self._client.write_gatt_char(self.data_uuid, data, response=False)
        except BleakError as e:
            raise ConnectionLost(f"Device disconnected: {e}") from e

    # called by Bleak, possibly on another thread; adapt into loop
    def _on_notification(self, sender: BleakGATTCharacteristic, data: bytearray) -> None:
        channel_id = str(getattr(sender, "uuid", sender)).lower()
        notification = Notification(channel_id=channel_id, value=bytes(data))
        try:
            self._loop.call_soon_threadsafe(self._dispatch, notification)
        except RuntimeError:
            # Loop closed; the waiting side will time out
            self._logger.error("Failed scheduling notification callback", exc_info=True)

    def _dispatch(self, notification: Notification) -> None:
        for callback in list(self._subscribers):
            callback(notification)
