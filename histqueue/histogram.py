"""Counting integers read from text into histogram intervals."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator, Sequence

from histqueue.protocol import Interval

MAX_LINE_LENGTH = 300
_PIECE = MAX_LINE_LENGTH - 1
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)", re.ASCII)


def parse_int(text: str) -> int:
    """Read a leading decimal integer the lenient way; 0 when there is none."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def bin_value(histogram: Sequence[Interval], value: int) -> int:
    """Count ``value`` in every interval holding it; return how many did."""
    matched = 0
    for interval in histogram:
        if value in interval:
            interval.count += 1
            matched += 1
    return matched


def _pieces(line: str) -> Iterator[str]:
    # Lines longer than the read buffer are consumed in several reads.
    for offset in range(0, len(line), _PIECE):
        yield line[offset:offset + _PIECE]


def count_lines(histogram: Sequence[Interval], lines: Iterable[str]) -> int:
    """Bin the number at the start of each line read; return how many were read."""
    total = 0
    for line in lines:
        for piece in _pieces(line):
            bin_value(histogram, parse_int(piece))
            total += 1
    return total


def count_file(histogram: Sequence[Interval], path: str | os.PathLike[str]) -> int:
    """Bin every line of the file at ``path``."""
    with open(path, "rb") as handle:
        return count_lines(histogram, (raw.decode("latin-1") for raw in handle))