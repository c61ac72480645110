# histqueue

`histqueue` counts integers read from text files into a histogram of
equal-width, half-open intervals `[start, end)`. A server and a client share
the work over file-backed message queues:

1. The client sends a request holding the interval count, the interval width
   and the start of the first interval.
2. The server reads the data files, taking the integer at the start of each
   line. It counts each file in its own worker process, or in its own thread,
   and adds the partial counts together.
3. The server sends the finished histogram back in records of up to 501
   intervals. The client puts the records together and prints the result.
   Then it tells the server `done`, and the server clears its queues and exits.

## Installation

```
pip install .
```

## Command-line use

Start the server first, then the client. The client sends its request, waits
15 seconds, and then reads every reply waiting on the queue. The server
answers one client and then exits.

Process-based pair. The server ignores its first argument, and every later
argument is a data file:

```
histserver x data1.txt data2.txt
histclient 10 5 0
```

Before it replies, the process-based server prints the summed histogram as
`start-end: count` lines. It then prints `All children terminated.` and pauses
for four seconds.

Thread-based pair. The server's first argument is the number of files to
count, and the files follow it. It takes at most 10 files. This pair uses its
own two queues, so it does not clash with the process-based pair:

```
histserver-th 2 data1.txt data2.txt
histclient-th 10 5 0
```

The client's arguments are the interval count, the interval width and the
start of the first interval. It prints `Final histogram counts are:` and then
one `[start,end): count` line per interval.

The server prints `server securely closed` when it ends normally. If the
client's closing message is not `done`, the server prints
`server cannot securely closed` and exits with status 1.

## Library use

```python
from histqueue.protocol import build_histogram
from histqueue.histogram import count_lines
from histqueue.client import format_histogram

histogram = build_histogram(3, 10, 0)   # [0,10), [10,20), [20,30)
count_lines(histogram, ["1", "15", "15", "29", "30"])
print(format_histogram(histogram))
# [0,10): 1
# [10,20): 2
# [20,30): 1
```

Values outside every interval are ignored. A line with no leading integer
counts as 0.

Modules:

- `histqueue.protocol`: `Interval`, the fixed-size wire records `HistData`
  and `Message` (each with `pack()` and `unpack()`), `build_histogram`,
  `split_chunks`, `apply_chunk`, `format_request`, `parse_request`.
- `histqueue.mqueue`: `MessageQueue(name, root=None)` with `send`,
  `receive(timeout=None)`, `pending`, `drain` and `close`. It can be used as a
  context manager. `receive` raises `TimeoutError` when the timeout passes
  with no message.
- `histqueue.histogram`: `parse_int`, `bin_value`, `count_lines`,
  `count_file`.
- `histqueue.server`: `collect_process`, `collect_threaded`,
  `serve(files, threaded=False, root=None, delay=1.0)`, `ShutdownError`.
- `histqueue.client`: `request_histogram(count, width, start, threaded=False,
  root=None, wait=15.0)`, `format_histogram`.

## Limits

The queues are directories of message files, kept by default in a
`histqueue` directory under the system temporary directory. Pass `root` to
keep them somewhere else. They are not operating-system message queues, so
other programs that use those queues cannot talk to this package. The server
handles a single request per run. It is not a long-running service.