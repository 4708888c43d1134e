from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator


class IndentLogger:
    """Logger wrapper that indents nested steps of a transfer."""

    def __init__(self, logger_obj: logging.Logger) -> None:
        self._logger: logging.Logger = logger_obj
        self._indent: int = 0

    @property
    def depth(self) -> int:
        return self._indent

    def _fmt(self, msg: str) -> str:
        return ("  " * self._indent) + msg

    @contextmanager
    def step(self, msg: str, *args: Any) -> Iterator[None]:
        """Log `msg` and indent everything logged inside the block."""
        self.debug("→ " + msg, *args)
        self._indent += 1
        try:
            yield
        finally:
            self._indent = max(0, self._indent - 1)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(self._fmt(msg), *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(self._fmt(msg), *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(self._fmt(msg), *args, **kwargs)
