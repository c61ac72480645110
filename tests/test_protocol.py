import pytest

from histqueue.protocol import (
    CHUNK_SIZE,
    NO_START,
    HistData,
    Interval,
    Message,
    apply_chunk,
    build_histogram,
    format_request,
    parse_request,
    split_chunks,
)


def test_build_histogram_intervals_are_adjacent():
    histogram = build_histogram(5, 10, -20)
    assert len(histogram) == 5
    assert histogram[0].start == -20
    for interval in histogram:
        assert interval.end == interval.start + 10
        assert interval.width == 10
        assert interval.count == 0
    for left, right in zip(histogram, histogram[1:]):
        assert right.start == left.end


def test_build_histogram_rejects_negative_count():
    with pytest.raises(ValueError):
        build_histogram(-1, 10, 0)


def test_interval_contains_is_half_open():
    interval = Interval(start=0, end=10, width=10)
    assert 0 in interval
    assert 9 in interval
    assert 10 not in interval


def test_split_small_histogram_is_one_chunk():
    histogram = build_histogram(7, 3, 1)
    for n, interval in enumerate(histogram):
        interval.count = n
    chunks = split_chunks(histogram, pid=42)
    assert len(chunks) == 1
    assert chunks[0].start_val == histogram[0].start
    assert chunks[0].counts == tuple(iv.count for iv in histogram)
    assert chunks[0].pid == 42


def test_split_even_histogram_ends_with_empty_chunk():
    histogram = build_histogram(CHUNK_SIZE * 2, 1, 0)
    chunks = split_chunks(histogram, pid=1)
    assert len(chunks) == 3
    assert chunks[-1].start_val == NO_START
    assert chunks[-1].counts == ()
    assert chunks[1].start_val == histogram[CHUNK_SIZE].start


@pytest.mark.parametrize("count", [0, 1, CHUNK_SIZE - 1, CHUNK_SIZE, CHUNK_SIZE + 3, 1200])
def test_split_then_apply_restores_counts(count):
    source = build_histogram(count, 2, 5)
    for n, interval in enumerate(source):
        interval.count = n % 17
    target = build_histogram(count, 2, 5)
    for chunk in split_chunks(source, pid=9):
        apply_chunk(target, HistData.unpack(chunk.pack()), accumulate=False)
    assert [iv.count for iv in target] == [iv.count for iv in source]
    assert sum(len(chunk.counts) for chunk in split_chunks(source, 9)) == count


def test_apply_accumulate_adds():
    source = build_histogram(600, 1, 0)
    for n, interval in enumerate(source):
        interval.count = n
    target = build_histogram(600, 1, 0)
    for _ in range(2):
        for chunk in split_chunks(source, pid=3):
            apply_chunk(target, chunk, accumulate=True)
    assert [iv.count for iv in target] == [2 * iv.count for iv in source]


def test_apply_unknown_start_raises():
    histogram = build_histogram(3, 10, 0)
    with pytest.raises(ValueError):
        apply_chunk(histogram, HistData(pid=1, start_val=5, counts=(1,)), accumulate=True)


def test_apply_overrun_raises():
    histogram = build_histogram(3, 10, 0)
    with pytest.raises(ValueError):
        apply_chunk(histogram, HistData(pid=1, start_val=20, counts=(1, 2)), accumulate=False)


def test_apply_no_start_leaves_histogram():
    histogram = build_histogram(3, 10, 0)
    apply_chunk(histogram, HistData(pid=1, start_val=NO_START), accumulate=True)
    assert [iv.count for iv in histogram] == [0, 0, 0]


def test_histdata_pack_size_is_fixed():
    short = HistData(pid=1, start_val=0, counts=(4, 5)).pack()
    full = HistData(pid=1, start_val=0, counts=tuple(range(CHUNK_SIZE))).pack()
    assert len(short) == len(full) == 2012


def test_histdata_full_round_trip():
    record = HistData(pid=77, start_val=-30, counts=tuple(range(CHUNK_SIZE)))
    assert HistData.unpack(record.pack()) == record


def test_histdata_rejects_too_many_counts():
    with pytest.raises(ValueError):
        HistData(pid=1, start_val=0, counts=(0,) * (CHUNK_SIZE + 1))


def test_histdata_unpack_rejects_wrong_size():
    with pytest.raises(ValueError):
        HistData.unpack(b"\0" * 10)


def test_message_round_trip():
    message = Message(id=1, text="done")
    data = message.pack()
    assert len(data) == 68
    assert Message.unpack(data) == message


def test_message_text_too_long():
    with pytest.raises(ValueError):
        Message(id=0, text="x" * 64).pack()


def test_request_round_trip():
    assert format_request(3, 10, 5) == "3 10 5"
    assert parse_request(format_request(12, 4, -8)) == (12, 4, -8)


def test_parse_request_needs_three_numbers():
    with pytest.raises(ValueError):
        parse_request("3 10")