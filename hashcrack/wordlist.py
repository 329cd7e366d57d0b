"""Streaming wordlist reader: one stripped byte candidate per line, in file order."""
import logging
from typing import BinaryIO, Iterator

from hashcrack.errors import SourceIOError

logger = logging.getLogger(__name__)


def read_candidates(stream: BinaryIO, path: str = "<stream>") -> Iterator[bytes]:
    """
    Yield candidates from an open binary stream.

    Each record loses its line terminator and surrounding whitespace. Empty
    records are still yielded. A failing read aborts iteration with
    SourceIOError; nothing is skipped.
    """
    while True:
        try:
            line = stream.readline()
        except OSError as ex:
            raise SourceIOError(path, ex) from ex
        if not line:
            return
        yield line.strip()


def iter_candidates(path: str) -> Iterator[bytes]:
    """Open path and stream its candidates. The file is closed when iteration ends."""
    try:
        f = open(path, "rb")
    except OSError as ex:
        raise SourceIOError(path, ex) from ex
    logger.debug("Opened wordlist %s", path)
    with f:
        yield from read_candidates(f, path)


def count_lines(path: str) -> int:
    """Count records in a file efficiently."""
    cnt = 0
    last = b""
    try:
        with open(path, "rb") as f:
            for block in iter(lambda: f.read(1024 * 1024), b""):
                cnt += block.count(b"\n")
                last = block[-1:]
    except OSError as ex:
        raise SourceIOError(path, ex) from ex
    if last and last != b"\n":
        cnt += 1
    return cnt
