from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Optional

from .constants import (
    NOTIFICATION_POLL_INTERVAL_S,
    NOTIFICATION_TIMEOUT_S,
    RESPONSE_OPCODE_POS,
    RESPONSE_RESULT_POS,
    ControlPointOpcode,
    ResultCode,
)
from .errors import CommandError, DFUError, NotificationTimeout, UnexpectedNotification
from .log import IndentLogger
from .transport import Notification, NotificationSource


class Verdict(Enum):
    DISCARD = "discard"
    MATCH = "match"
    FAIL = "fail"


@dataclass(frozen=True)
class ParseResult:
    verdict: Verdict
    value: Optional[bytes] = None
    error: Optional[DFUError] = None


_DISCARD = ParseResult(Verdict.DISCARD)


class NotificationQueue:
    """
    Buffers control point notifications and hands out responses by opcode.

    While listening, every notification from the source is queued, whether
    or not a reader is waiting. read_next() drains the queue from the head
    until it finds the response to the requested operation. Notifications
    that are not responses, or come from another characteristic, are dropped.
    """

    def __init__(
            self,
            source: NotificationSource,
            control_channel_id: Any,
            timeout: float = NOTIFICATION_TIMEOUT_S,
            poll_interval: float = NOTIFICATION_POLL_INTERVAL_S,
            logger: Optional[IndentLogger] = None,
    ) -> None:
        self._source = source
        self._control_channel_id = _normalize_channel_id(control_channel_id)
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._notifications: Optional[Deque[Notification]] = None
        self._log = logger or IndentLogger(logging.getLogger(self.__class__.__name__))

    @property
    def is_listening(self) -> bool:
        return self._notifications is not None

    @property
    def pending(self) -> int:
        return len(self._notifications) if self._notifications is not None else 0

    def start_listening(self) -> None:
        if self._notifications is not None:
            return
        self._notifications = deque()
        self._source.subscribe(self._on_notification_received)
        self._log.debug("Listening for notifications on %s", self._control_channel_id)

    def stop_listening(self) -> None:
        """Stop listening and drop anything not yet read."""
        self._source.unsubscribe(self._on_notification_received)
        if self._notifications:
            self._log.debug("Dropping %d unread notification(s)", len(self._notifications))
        self._notifications = None

    def _on_notification_received(self, notification: Notification) -> None:
        if self._notifications is not None:
            self._notifications.append(notification)

    async def read_next(
            self,
            op_code: int,
            timeout: Optional[float] = None,
            poll_interval: Optional[float] = None,
    ) -> bytes:
        """
        Wait for the next successful response to `op_code` and return its value.

        Raises:
            NotificationTimeout: nothing matched before `timeout` seconds.
            UnexpectedNotification: a response to another opcode was read.
            CommandError: the device answered `op_code` with a failure code.
        """
        timeout = self._timeout if timeout is None else timeout
        poll_interval = self._poll_interval if poll_interval is None else poll_interval

        waiter = asyncio.ensure_future(self._wait_for_notification(op_code, poll_interval))
        deadline = asyncio.ensure_future(asyncio.sleep(timeout))
        try:
            done, _ = await asyncio.wait({waiter, deadline}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (waiter, deadline):
                if not task.done():
                    task.cancel()
                    try:
                        await task
                    except asyncio.CancelledError:
                        pass

        if waiter in done:
            return waiter.result()
        self._log.warning("Timed out after %.1fs waiting for response to 0x%02X", timeout, op_code)
        raise NotificationTimeout(
            f"Timed out when waiting for response to operation 0x{op_code:02X}"
        )

    async def _wait_for_notification(self, op_code: int, poll_interval: float) -> bytes:
        while True:
            value = self._find_notification(op_code)
            if value is not None:
                return value
            await asyncio.sleep(poll_interval)

    def _find_notification(self, op_code: int) -> Optional[bytes]:
        while self._notifications:
            result = self.parse_notification(op_code, self._notifications.popleft())
            if result.verdict is Verdict.MATCH:
                return result.value
            if result.verdict is Verdict.FAIL:
                self._log.warning("%s", result.error)
                raise result.error
        return None

    def parse_notification(self, op_code: int, notification: Notification) -> ParseResult:
        if _normalize_channel_id(notification.channel_id) != self._control_channel_id:
            self._log.debug("Discarding notification from %s", notification.channel_id)
            return _DISCARD
        value = notification.value
        if not value or value[0] != ControlPointOpcode.RESPONSE:
            self._log.debug("Discarding non-response notification %s", value.hex())
            return _DISCARD

        if len(value) <= RESPONSE_OPCODE_POS:
            return ParseResult(Verdict.FAIL, error=UnexpectedNotification(
                f"Got unexpected response. Expected response to 0x{op_code:02X}, "
                "but the response carries no opcode."
            ))
        response_op = value[RESPONSE_OPCODE_POS]
        if response_op != op_code:
            return ParseResult(Verdict.FAIL, error=UnexpectedNotification(
                f"Got unexpected response. Expected response to 0x{op_code:02X}, "
                f"but got response to 0x{response_op:02X}."
            ))

        if len(value) <= RESPONSE_RESULT_POS:
            return ParseResult(Verdict.FAIL, error=CommandError(
                f"Operation 0x{op_code:02X} returned no result code",
                result_code=None,
            ))
        result = value[RESPONSE_RESULT_POS]
        if result != ResultCode.SUCCESS:
            return ParseResult(Verdict.FAIL, error=CommandError(
                f"Operation 0x{op_code:02X} returned error code 0x{result:02X} "
                f"({_result_name(result)})",
                result_code=result,
            ))

        self._log.debug("Response to 0x%02X: %s", op_code, value.hex())
        return ParseResult(Verdict.MATCH, value=value)


def _normalize_channel_id(channel_id: Any) -> Any:
    # Characteristic UUIDs compare case-insensitively
    if isinstance(channel_id, str):
        return channel_id.lower()
    return channel_id


def _result_name(result: int) -> str:
    try:
        return ResultCode(result).name
    except ValueError:
        return "UNKNOWN"
