"""Histogram server: counts numbers from files and answers one client request."""

from __future__ import annotations

import os
import sys
import tempfile
import threading
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from multiprocessing import Process

from histqueue.histogram import count_file, parse_int
from histqueue.mqueue import POLL_INTERVAL, MessageQueue
from histqueue.protocol import (
    HistData,
    Interval,
    Message,
    apply_chunk,
    build_histogram,
    parse_request,
    split_chunks,
)

CTOSMQ = "/mq1"
STOCMQ = "/mq2"
CTOPMQ = "/mq3"
CSTHMQ = "/mq4"
SCTHMQ = "/mq5"

MAX_THREADS = 10
DONE_TEXT = "done"

PathLike = str | os.PathLike[str]


class ShutdownError(RuntimeError):
    """The client's closing message was not the expected ``done``."""


def _count_and_report(path: str, count: int, width: int, start: int, root: str) -> None:
    histogram = build_histogram(count, width, start)
    try:
        count_file(histogram, path)
    except OSError:
        print(f"Error: could not open file {path}")
        sys.exit(1)
    with MessageQueue(CTOPMQ, root) as queue:
        for chunk in split_chunks(histogram, os.getpid()):
            queue.send(chunk.pack())


def _merge(histogram: Sequence[Interval], data: bytes) -> None:
    apply_chunk(histogram, HistData.unpack(data), accumulate=True)


def collect_process(
    files: Sequence[PathLike], count: int, width: int, start: int
) -> list[Interval]:
    """Count each file in its own process and sum the partial histograms.

    A file that cannot be opened is reported by its worker and left out.
    """
    histogram = build_histogram(count, width, start)
    with tempfile.TemporaryDirectory() as root, MessageQueue(CTOPMQ, root) as queue:
        workers = [
            Process(
                target=_count_and_report,
                args=(os.fspath(path), count, width, start, root),
            )
            for path in files
        ]
        for worker in workers:
            worker.start()
        while any(worker.is_alive() for worker in workers):
            try:
                _merge(histogram, queue.receive(timeout=POLL_INTERVAL))
            except TimeoutError:
                continue
        for worker in workers:
            worker.join()
        while queue.pending():
            _merge(histogram, queue.receive(timeout=POLL_INTERVAL))
    return histogram


def collect_threaded(
    files: Sequence[PathLike], count: int, width: int, start: int
) -> list[Interval]:
    """Count each file in its own thread into one shared histogram.

    Raises ``OSError`` when a file cannot be opened.
    """
    if len(files) > MAX_THREADS:
        raise ValueError(f"at most {MAX_THREADS} files, got {len(files)}")
    histogram = build_histogram(count, width, start)
    lock = threading.Lock()

    def work(path: PathLike) -> None:
        partial = build_histogram(count, width, start)
        count_file(partial, path)
        with lock:
            for total, part in zip(histogram, partial):
                total.count += part.count

    if files:
        with ThreadPoolExecutor(max_workers=len(files)) as pool:
            for future in [pool.submit(work, path) for path in files]:
                future.result()
    return histogram


def _print_histogram(histogram: Sequence[Interval]) -> None:
    print("Final histogram counts are:")
    for interval in histogram:
        print(f"{interval.start}-{interval.end}: {interval.count}")


def serve(
    files: Sequence[PathLike],
    threaded: bool = False,
    root: PathLike | None = None,
    delay: float = 1.0,
) -> list[Interval]:
    """Answer one client: read its request, count the files, send the result.

    ``delay`` is the pause in seconds between reply records. Returns the
    histogram sent; raises ``ShutdownError`` if the client does not finish
    with ``done``.
    """
    request_name, reply_name = (CSTHMQ, SCTHMQ) if threaded else (CTOSMQ, STOCMQ)
    with MessageQueue(request_name, root) as requests:
        request = Message.unpack(requests.receive())
        count, width, start = parse_request(request.text)
        collect = collect_threaded if threaded else collect_process
        histogram = collect(files, count, width, start)
        if not threaded:
            _print_histogram(histogram)
            print("All children terminated.")
            time.sleep(4 * delay)
        with MessageQueue(reply_name, root) as replies:
            for chunk in split_chunks(histogram, os.getpid()):
                replies.send(chunk.pack())
                time.sleep(delay)
            closing = Message.unpack(requests.receive())
            if closing.text != DONE_TEXT:
                raise ShutdownError(f"expected {DONE_TEXT!r}, got {closing.text!r}")
            requests.drain()
            replies.drain()
    print("server securely closed")
    return histogram


def main(argv: Sequence[str] | None = None) -> int:
    """Serve with one worker process per file; the first argument is ignored."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        serve(args[1:])
    except ShutdownError:
        print("server cannot securely closed")
        return 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def main_threaded(argv: Sequence[str] | None = None) -> int:
    """Serve with one thread per file; arguments are a file count and the files."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not 1 <= len(args) <= MAX_THREADS + 1:
        print("not right file count")
        return 1
    wanted = parse_int(args[0])
    files = args[1:]
    if wanted < 0 or wanted > len(files):
        print("not right file count")
        return 1
    try:
        serve(files[:wanted], threaded=True)
    except ShutdownError:
        print("server cannot securely closed")
        return 1
    except (OSError, ValueError) as exc:
        print(f"error in thread func: {exc}", file=sys.stderr)
        return 1
    return 0