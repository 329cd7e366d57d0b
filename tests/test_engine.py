import functools
import hashlib
import io
import time

import pytest

from hashcrack.engine import find_first_match, find_first_match_parallel
from hashcrack.errors import ScanTimeoutError, SourceIOError
from hashcrack.progress import ProgressTracker
from hashcrack.wordlist import read_candidates


def md5(s: str) -> str:
    return hashlib.md5(s.encode()).hexdigest()


def sha256(s: str) -> str:
    return hashlib.sha256(s.encode()).hexdigest()


ENGINES = [
    pytest.param(find_first_match, id="sequential"),
    pytest.param(functools.partial(find_first_match_parallel, workers=4, chunk_size=1), id="parallel-chunk1"),
    pytest.param(functools.partial(find_first_match_parallel, workers=3, chunk_size=2), id="parallel-chunk2"),
]


class CountingStream(io.BytesIO):
    def __init__(self, data: bytes):
        super().__init__(data)
        self.reads = 0

    def readline(self, *args):
        self.reads += 1
        return super().readline(*args)


class FaultyStream(io.BytesIO):
    def __init__(self, data: bytes, fail_after: int):
        super().__init__(data)
        self.fail_after = fail_after
        self.reads = 0

    def readline(self, *args):
        if self.reads >= self.fail_after:
            raise OSError("device went away")
        self.reads += 1
        return super().readline(*args)


def lines(*words: str) -> bytes:
    return "".join(w + "\n" for w in words).encode()


@pytest.mark.parametrize("engine", ENGINES)
def test_finds_password_in_middle(engine):
    stream = io.BytesIO(lines("hello", "password", "admin"))
    result = engine(read_candidates(stream), md5("password"), "md5")
    assert result.found is True
    assert result.password == "password"
    assert result.candidate == b"password"
    assert result.line_number == 2
    assert result.algorithm == "md5"


@pytest.mark.parametrize("engine", ENGINES)
def test_empty_wordlist_is_not_found(engine):
    result = engine(read_candidates(io.BytesIO(b"")), md5("anything"), "md5")
    assert result.found is False
    assert result.password is None
    assert result.attempts == 0


@pytest.mark.parametrize("engine", ENGINES)
def test_whitespace_is_stripped_before_hashing(engine):
    result = engine(read_candidates(io.BytesIO(b"  admin  \n")), md5("admin"), "md5")
    assert result.found is True
    assert result.password == "admin"


@pytest.mark.parametrize("engine", ENGINES)
def test_uppercase_target_still_matches(engine):
    target = sha256("dragon").upper()
    result = engine(read_candidates(io.BytesIO(lines("qwerty", "dragon"))), target, "sha256")
    assert result.found is True
    assert result.password == "dragon"
    assert result.target == target.lower()


@pytest.mark.parametrize("engine", ENGINES)
def test_first_match_in_file_order_wins(engine):
    words = ["a", "b", "password", "c", "password", "d", "password"]
    result = engine(read_candidates(io.BytesIO(lines(*words))), md5("password"), "md5")
    assert result.found is True
    assert result.line_number == 3


@pytest.mark.parametrize("engine", ENGINES)
def test_no_match_consumes_source_exactly_once(engine):
    words = ["one", "two", "three", "four", "five"]
    stream = CountingStream(lines(*words))
    result = engine(read_candidates(stream), md5("missing"), "md5")
    assert result.found is False
    assert result.attempts == len(words)
    # one readline per record plus the end-of-file read
    assert stream.reads == len(words) + 1


def test_sequential_stops_reading_at_match():
    stream = CountingStream(lines("x", "password", "y", "z"))
    result = find_first_match(read_candidates(stream), md5("password"), "md5")
    assert result.found is True
    assert result.attempts == 2
    assert stream.reads == 2


@pytest.mark.parametrize("engine", ENGINES)
def test_io_fault_midway_is_surfaced(engine):
    stream = FaultyStream(lines("l1", "l2", "l3", "l4", "l5"), fail_after=2)
    with pytest.raises(SourceIOError):
        engine(read_candidates(stream, "faulty.txt"), md5("l5"), "md5")


@pytest.mark.parametrize("word,line_number", [("l1", 1), ("l2", 2)])
@pytest.mark.parametrize("engine", ENGINES + [
    pytest.param(functools.partial(find_first_match_parallel, workers=2, chunk_size=4), id="parallel-chunk4"),
])
def test_match_before_io_fault_is_returned(engine, word, line_number):
    stream = FaultyStream(lines("l1", "l2", "l3", "l4", "l5"), fail_after=2)
    # a slow callback lets the reader run ahead of the workers
    tracker = ProgressTracker(interval=0.0, callback=lambda evt: time.sleep(0.01))
    result = engine(read_candidates(stream, "faulty.txt"), md5(word), "md5", tracker=tracker)
    assert result.found is True
    assert result.password == word
    assert result.line_number == line_number


@pytest.mark.parametrize("engine", ENGINES)
def test_plain_iterables_are_accepted(engine):
    result = engine([b"foo", b"bar"], md5("bar"), "md5")
    assert result.found is True
    assert result.line_number == 2


@pytest.mark.parametrize("engine", ENGINES)
def test_unknown_algorithm_rejected_before_scan(engine):
    with pytest.raises(ValueError):
        engine([], md5("x"), "unknown-algo")


def test_parallel_rejects_bad_worker_count():
    with pytest.raises(ValueError):
        find_first_match_parallel([b"a"], md5("a"), "md5", workers=0)


def test_parallel_matches_sequential_on_larger_list():
    words = [f"word{i}" for i in range(500)]
    data = lines(*words)
    target = md5("word377")
    seq = find_first_match(read_candidates(io.BytesIO(data)), target, "md5")
    par = find_first_match_parallel(read_candidates(io.BytesIO(data)), target, "md5",
                                    workers=4, chunk_size=16)
    assert (seq.found, seq.candidate, seq.line_number) == (par.found, par.candidate, par.line_number)
    assert par.line_number == 378


def test_tracker_counts_attempts_and_reports():
    events = []
    tracker = ProgressTracker(total=3, interval=0.0, callback=events.append)
    result = find_first_match([b"a", b"b", b"c"], md5("zzz"), "md5", tracker=tracker)
    assert result.found is False
    assert tracker.attempts == 3
    assert events[-1] == {"attempts": 3, "total": 3, "percent": 100.0}
    assert [e["attempts"] for e in events] == sorted(e["attempts"] for e in events)


def test_timeout_aborts_scan():
    def slow_candidates():
        for word in (b"a", b"b", b"c", b"d"):
            time.sleep(0.05)
            yield word

    tracker = ProgressTracker(interval=60.0, timeout=0.01)
    with pytest.raises(ScanTimeoutError) as exc:
        find_first_match(slow_candidates(), md5("d"), "md5", tracker=tracker)
    assert exc.value.attempts >= 1
