"""A queue sender that logs every message it passes on."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class _Queue(Protocol[T]):
    def put_nowait(self, item: T) -> None: ...


def _message_name(message: Any) -> str:
    """A short name for a message: the string itself, or its type's name."""
    if isinstance(message, str):
        return message
    return type(message).__name__


@dataclass(frozen=True)
class LoggingSender(Generic[T]):
    """Puts messages on a queue, logging each one under ``channel_name``.

    Works with any queue offering ``put_nowait``, such as ``queue.Queue`` or
    ``asyncio.Queue``; errors from the queue (e.g. ``queue.Full``) propagate.
    """

    tx: _Queue[T]
    channel_name: str

    def send(self, message: T) -> None:
        log.debug(
            "%s::%s %r", self.channel_name, _message_name(message), message
        )
        self.tx.put_nowait(message)