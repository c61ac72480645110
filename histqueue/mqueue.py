"""A named FIFO message queue shared between processes through a directory."""

from __future__ import annotations

import itertools
import os
import tempfile
import threading
import time
from pathlib import Path

DEFAULT_ROOT = Path(tempfile.gettempdir()) / "histqueue"
MAX_MESSAGE_SIZE = 8192
POLL_INTERVAL = 0.01
_SUFFIX = ".msg"


class MessageQueue:
    """A queue named like ``/mq1``; every handle with the same name and root shares it."""

    def __init__(self, name: str, root: str | os.PathLike[str] | None = None) -> None:
        stem = name.strip("/")
        if not stem or "/" in stem:
            raise ValueError(f"invalid queue name: {name!r}")
        self.name = name
        self.path = Path(root if root is not None else DEFAULT_ROOT) / stem
        self.path.mkdir(parents=True, exist_ok=True)
        self._closed = False
        self._counter = itertools.count()

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"queue {self.name} is closed")

    def _entries(self) -> list[Path]:
        return sorted(p for p in self.path.iterdir() if p.suffix == _SUFFIX)

    def send(self, data: bytes) -> None:
        """Append one message."""
        self._check_open()
        payload = bytes(data)
        if len(payload) > MAX_MESSAGE_SIZE:
            raise ValueError(
                f"message of {len(payload)} bytes exceeds {MAX_MESSAGE_SIZE}"
            )
        stamp = (
            f"{time.time_ns():020d}-{os.getpid():010d}-"
            f"{threading.get_ident()}-{next(self._counter):010d}"
        )
        scratch = self.path / f".{stamp}.tmp"
        scratch.write_bytes(payload)
        os.replace(scratch, self.path / f"{stamp}{_SUFFIX}")

    def _take(self) -> bytes | None:
        for entry in self._entries():
            claimed = entry.with_name(
                f".{entry.stem}.{os.getpid()}.{threading.get_ident()}.claim"
            )
            try:
                os.rename(entry, claimed)
            except FileNotFoundError:
                continue
            try:
                return claimed.read_bytes()
            finally:
                claimed.unlink()
        return None

    def receive(self, timeout: float | None = None) -> bytes:
        """Remove and return the oldest message, waiting for one to arrive.

        Raises ``TimeoutError`` when ``timeout`` seconds pass without a message.
        """
        self._check_open()
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            data = self._take()
            if data is not None:
                return data
            if deadline is not None and time.monotonic() >= deadline:
                raise TimeoutError(f"no message on {self.name} within {timeout} s")
            time.sleep(POLL_INTERVAL)

    def pending(self) -> int:
        """Number of messages waiting."""
        self._check_open()
        return len(self._entries())

    def drain(self) -> int:
        """Discard every waiting message and return how many there were."""
        self._check_open()
        removed = 0
        while self._take() is not None:
            removed += 1
        return removed

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> MessageQueue:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()