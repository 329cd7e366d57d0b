"""
Match engine: find the first wordlist candidate whose digest equals the target.

Two interchangeable strategies share the same contract:
- find_first_match: strictly sequential single pass.
- find_first_match_parallel: chunks of the stream are hashed on a thread
  pool; the lowest matching line number wins, so callers see the same
  result as the sequential engine.
"""
import logging
import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass
from itertools import islice
from typing import Iterable, List, Optional

from hashcrack.digest import check_algorithm, digest_hex
from hashcrack.progress import ProgressTracker

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024


@dataclass
class CrackResult:
    found: bool
    algorithm: str
    target: str
    candidate: Optional[bytes] = None
    line_number: Optional[int] = None
    attempts: int = 0
    wordlist: Optional[str] = None
    elapsed: float = 0.0

    @property
    def password(self) -> Optional[str]:
        if self.candidate is None:
            return None
        return self.candidate.decode("utf-8", errors="replace")


def _close(candidates) -> None:
    # Releases the reader's file handle when we stop before exhaustion
    close = getattr(candidates, "close", None)
    if callable(close):
        close()


def find_first_match(candidates: Iterable[bytes], target: str, algorithm: str = "md5",
                     tracker: Optional[ProgressTracker] = None) -> CrackResult:
    """
    Hash candidates one at a time and stop at the first digest equal to target.

    Comparison is done on lowercase hex. Exhausting the candidates returns a
    result with found=False. Errors raised by the candidate source propagate.
    """
    target = target.lower()
    algorithm = check_algorithm(algorithm)
    attempts = 0
    try:
        for line_number, candidate in enumerate(candidates, start=1):
            attempts += 1
            if tracker:
                tracker.increment()
            if digest_hex(candidate, algorithm) == target:
                logger.debug("Match at line %d after %d attempts", line_number, attempts)
                return CrackResult(found=True, algorithm=algorithm, target=target,
                                   candidate=candidate, line_number=line_number, attempts=attempts)
    finally:
        _close(candidates)
    return CrackResult(found=False, algorithm=algorithm, target=target, attempts=attempts)


class _FirstMatch:
    """Lowest-numbered match reported by any worker. The only state workers share."""

    def __init__(self):
        self._lock = threading.Lock()
        self.found = threading.Event()
        self.line_number: Optional[int] = None
        self.candidate: Optional[bytes] = None

    def offer(self, line_number: int, candidate: bytes) -> None:
        with self._lock:
            if self.line_number is None or line_number < self.line_number:
                self.line_number = line_number
                self.candidate = candidate
            self.found.set()

    def precedes(self, line_number: int) -> bool:
        """True if a match earlier than line_number is already known."""
        with self._lock:
            return self.line_number is not None and self.line_number < line_number


def _scan_chunk(chunk: List[bytes], first_line: int, target: str, algorithm: str,
                best: _FirstMatch, tracker: Optional[ProgressTracker]) -> int:
    tried = 0
    for offset, candidate in enumerate(chunk):
        line_number = first_line + offset
        if best.found.is_set() and best.precedes(line_number):
            break
        tried += 1
        if tracker:
            tracker.increment()
        if digest_hex(candidate, algorithm) == target:
            best.offer(line_number, candidate)
            break
    return tried


def find_first_match_parallel(candidates: Iterable[bytes], target: str, algorithm: str = "md5",
                              workers: int = 4, chunk_size: int = DEFAULT_CHUNK_SIZE,
                              tracker: Optional[ProgressTracker] = None) -> CrackResult:
    """
    Same contract as find_first_match, with hashing spread over worker threads.

    The calling thread reads the stream and submits numbered chunks, keeping
    at most 2 * workers chunks in flight. Once any worker reports a match no
    further chunks are read; chunks that start earlier still run so that the
    lowest line number is reported.
    """
    if workers < 1:
        raise ValueError("workers must be >= 1")
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    target = target.lower()
    algorithm = check_algorithm(algorithm)

    best = _FirstMatch()
    attempts = 0
    max_pending = workers * 2
    next_line = 1
    read_error: Optional[Exception] = None
    iterator = iter(candidates)
    try:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hashcrack") as executor:
            pending = set()
            try:
                while not best.found.is_set():
                    chunk = []
                    try:
                        for candidate in islice(iterator, chunk_size):
                            chunk.append(candidate)
                    except Exception as ex:
                        # Lines read before the failure are still scanned
                        read_error = ex
                    if chunk:
                        pending.add(executor.submit(_scan_chunk, chunk, next_line, target, algorithm,
                                                    best, tracker))
                        next_line += len(chunk)
                    if read_error is not None or not chunk:
                        break
                    if len(pending) >= max_pending:
                        done, pending = wait(pending, return_when=FIRST_COMPLETED)
                        attempts += sum(f.result() for f in done)
                done, pending = wait(pending)
                attempts += sum(f.result() for f in done)
            except BaseException:
                for f in pending:
                    f.cancel()
                raise
    finally:
        _close(iterator)

    # Every submitted line precedes the failed read, so any match found wins over the error
    if read_error is not None and best.line_number is None:
        logger.debug("Read failed after line %d with no earlier match", next_line - 1)
        raise read_error
    logger.debug("Parallel scan finished: %d attempts over %d lines read", attempts, next_line - 1)
    if best.line_number is None:
        return CrackResult(found=False, algorithm=algorithm, target=target, attempts=attempts)
    return CrackResult(found=True, algorithm=algorithm, target=target, candidate=best.candidate,
                       line_number=best.line_number, attempts=attempts)
