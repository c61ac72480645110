"""Histogram intervals and the fixed-size records exchanged over the queues."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass
from itertools import takewhile

CHUNK_SIZE = 501
END_MARK = -1
NO_START = -1
TEXT_SIZE = 64

_HISTDATA = struct.Struct(f"<i{CHUNK_SIZE}ii")
_MESSAGE = struct.Struct(f"<i{TEXT_SIZE}s")

HISTDATA_SIZE = _HISTDATA.size
MESSAGE_SIZE = _MESSAGE.size


@dataclass
class Interval:
    """A half-open bin ``[start, end)`` with a running count."""

    start: int
    end: int
    width: int
    count: int = 0

    def __contains__(self, value: int) -> bool:
        return self.start <= value < self.end


@dataclass(frozen=True)
class HistData:
    """Up to ``CHUNK_SIZE`` consecutive bin counts starting at ``start_val``."""

    pid: int
    start_val: int
    counts: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        counts = tuple(self.counts)
        if len(counts) > CHUNK_SIZE:
            raise ValueError(f"a chunk holds at most {CHUNK_SIZE} counts, got {len(counts)}")
        if any(count < 0 for count in counts):
            raise ValueError("counts must not be negative")
        object.__setattr__(self, "counts", counts)

    def pack(self) -> bytes:
        """Encode as the fixed-size wire record."""
        slots = list(self.counts)
        if len(slots) < CHUNK_SIZE:
            slots.append(END_MARK)
            slots.extend([0] * (CHUNK_SIZE - len(slots)))
        try:
            return _HISTDATA.pack(self.pid, *slots, self.start_val)
        except struct.error as exc:
            raise ValueError(f"value does not fit the record: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> HistData:
        """Decode a wire record; counts stop at the first end mark."""
        if len(data) != HISTDATA_SIZE:
            raise ValueError(f"expected {HISTDATA_SIZE} bytes, got {len(data)}")
        values = _HISTDATA.unpack(data)
        counts = tuple(takewhile(lambda value: value != END_MARK, values[1:-1]))
        return cls(pid=values[0], start_val=values[-1], counts=counts)


@dataclass(frozen=True)
class Message:
    """A short text message tagged with an id."""

    id: int
    text: str

    def pack(self) -> bytes:
        raw = self.text.encode("utf-8")
        if len(raw) >= TEXT_SIZE:
            raise ValueError(f"message text must be shorter than {TEXT_SIZE} bytes")
        try:
            return _MESSAGE.pack(self.id, raw)
        except struct.error as exc:
            raise ValueError(f"value does not fit the record: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> Message:
        if len(data) != MESSAGE_SIZE:
            raise ValueError(f"expected {MESSAGE_SIZE} bytes, got {len(data)}")
        ident, raw = _MESSAGE.unpack(data)
        text = raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        return cls(id=ident, text=text)


def build_histogram(count: int, width: int, start: int) -> list[Interval]:
    """Return ``count`` adjacent empty intervals of ``width`` from ``start``."""
    if count < 0:
        raise ValueError("interval count must not be negative")
    histogram: list[Interval] = []
    begin = start
    for _ in range(count):
        histogram.append(Interval(start=begin, end=begin + width, width=width))
        begin += width
    return histogram


def split_chunks(histogram: Sequence[Interval], pid: int) -> list[HistData]:
    """Cut the histogram counts into records of at most ``CHUNK_SIZE`` bins.

    There is always one more record than there are full chunks; when the
    histogram divides evenly that last record is empty and has no start.
    """
    full = len(histogram) // CHUNK_SIZE * CHUNK_SIZE
    chunks = [
        HistData(
            pid=pid,
            start_val=histogram[offset].start,
            counts=tuple(iv.count for iv in histogram[offset:offset + CHUNK_SIZE]),
        )
        for offset in range(0, full, CHUNK_SIZE)
    ]
    tail = histogram[full:]
    if tail:
        chunks.append(HistData(pid=pid, start_val=tail[0].start,
                               counts=tuple(iv.count for iv in tail)))
    else:
        chunks.append(HistData(pid=pid, start_val=NO_START))
    return chunks


def apply_chunk(histogram: Sequence[Interval], chunk: HistData, accumulate: bool) -> None:
    """Write a record's counts into the matching bins, adding or replacing."""
    if chunk.start_val == NO_START:
        return
    index = next(
        (i for i, iv in enumerate(histogram) if iv.start == chunk.start_val), None
    )
    if index is None:
        raise ValueError(f"no interval starts at {chunk.start_val}")
    targets = histogram[index:index + len(chunk.counts)]
    if len(targets) < len(chunk.counts):
        raise ValueError("chunk runs past the end of the histogram")
    for interval, count in zip(targets, chunk.counts):
        interval.count = interval.count + count if accumulate else count


def format_request(count: int, width: int, start: int) -> str:
    """Render the histogram parameters as the request text."""
    return f"{count} {width} {start}"


def parse_request(text: str) -> tuple[int, int, int]:
    """Read ``count width start`` from a request text."""
    tokens = text.split(" ")
    tokens = [token for token in tokens if token]
    if len(tokens) < 3:
        raise ValueError(f"request needs three numbers: {text!r}")
    count, width, start = (int(token) for token in tokens[:3])
    return count, width, start