"""Histogram client: asks the server for a histogram and prints it."""

from __future__ import annotations

import argparse
import os
import sys
import time
from collections.abc import Sequence

from histqueue.histogram import parse_int
from histqueue.mqueue import POLL_INTERVAL, MessageQueue
from histqueue.protocol import (
    HistData,
    Interval,
    Message,
    apply_chunk,
    build_histogram,
    format_request,
)
from histqueue.server import CSTHMQ, CTOSMQ, DONE_TEXT, SCTHMQ, STOCMQ

DEFAULT_WAIT = 15.0


def request_histogram(
    count: int,
    width: int,
    start: int,
    threaded: bool = False,
    root: str | os.PathLike[str] | None = None,
    wait: float = DEFAULT_WAIT,
) -> list[Interval]:
    """Send a request, wait ``wait`` seconds, take every reply, then say done."""
    histogram = build_histogram(count, width, start)
    request_name, reply_name = (CSTHMQ, SCTHMQ) if threaded else (CTOSMQ, STOCMQ)
    with MessageQueue(request_name, root) as requests:
        with MessageQueue(reply_name, root) as replies:
            requests.send(Message(0, format_request(count, width, start)).pack())
            time.sleep(wait)
            while replies.pending():
                try:
                    data = replies.receive(timeout=POLL_INTERVAL)
                except TimeoutError:
                    break
                apply_chunk(histogram, HistData.unpack(data), accumulate=False)
        requests.send(Message(1, DONE_TEXT).pack())
    return histogram


def format_histogram(histogram: Sequence[Interval]) -> str:
    """Render one ``[start,end): count`` line per interval."""
    return "\n".join(f"[{iv.start},{iv.end}): {iv.count}" for iv in histogram)


def _parser(prog: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Request a histogram.")
    parser.add_argument("count", type=parse_int, help="number of intervals")
    parser.add_argument("width", type=parse_int, help="width of each interval")
    parser.add_argument("start", type=parse_int, help="start of the first interval")
    return parser


def _run(argv: Sequence[str] | None, threaded: bool, prog: str) -> int:
    args = _parser(prog).parse_args(list(sys.argv[1:] if argv is None else argv))
    histogram = request_histogram(args.count, args.width, args.start, threaded=threaded)
    print("Final histogram counts are:")
    if histogram:
        print(format_histogram(histogram))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Ask the process-based server."""
    return _run(argv, threaded=False, prog="histclient")


def main_threaded(argv: Sequence[str] | None = None) -> int:
    """Ask the thread-based server."""
    return _run(argv, threaded=True, prog="histclient_th")