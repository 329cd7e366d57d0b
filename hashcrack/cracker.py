#!/usr/bin/env python3
"""
Hash Cracker - dictionary attack against a single hex digest.

Features:
- Supports MD5, SHA1, SHA224, SHA256, SHA384, SHA512
- Streams the wordlist, stops at the first match
- Hash format detection
- Optional multi-threaded scan with first-in-file-order results
- Progress tracking

Ethical Warning:
This tool is intended strictly for authorized security testing, research, and educational purposes.
Do not use it on systems, accounts, or data that you do not own or have explicit written permission to test.
Misuse may be illegal and unethical.

Usage examples:
- Wordlist attack with auto-detection:
  hashcrack --hash 5f4dcc3b5aa765d61d8327deb882cf99 --wordlist /path/to/rockyou.txt

- Four worker threads, sha256, progress totals:
  hashcrack -H <sha256-hex> -w rockyou.txt --algo sha256 --workers 4 --count
"""
import argparse
import logging
import os
import sys
import time
from typing import Optional

from hashcrack.config import CrackerConfig, load_config
from hashcrack.digest import SUPPORTED_ALGOS, detect_hash_algorithm, normalize_target
from hashcrack.engine import CrackResult, find_first_match, find_first_match_parallel
from hashcrack.errors import (
    CrackError,
    InvalidTargetError,
    ScanTimeoutError,
    SourceIOError,
    UnsupportedAlgorithmError,
)
from hashcrack.progress import ProgressCallback, ProgressTracker
from hashcrack.wordlist import count_lines, iter_candidates

logger = logging.getLogger(__name__)

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2
EXIT_TIMEOUT = 3
EXIT_INTERRUPTED = 130


def eprint(*args, **kwargs):
    print(*args, file=sys.stderr, **kwargs)


class HashCracker:
    """
    Hash Cracker library interface.

    Warning: Authorized testing only. Ensure you have explicit permission.
    """

    def __init__(self, workers: int = 1, chunk_size: int = 1024, progress_interval: float = 1.0,
                 count_total: bool = False, timeout: Optional[float] = None,
                 algorithm: Optional[str] = None):
        self.workers = workers
        self.chunk_size = chunk_size
        self.progress_interval = progress_interval
        self.count_total = count_total
        self.timeout = timeout
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, cfg: CrackerConfig) -> "HashCracker":
        return cls(
            workers=cfg.workers,
            chunk_size=cfg.chunk_size,
            progress_interval=cfg.progress_interval,
            count_total=cfg.count_total,
            timeout=cfg.timeout,
            algorithm=cfg.algorithm,
        )

    @staticmethod
    def detect_algorithm(hash_str: str) -> Optional[str]:
        return detect_hash_algorithm(hash_str)

    def crack(self, hash_str: str, wordlist: str, algorithm: Optional[str] = None,
              progress_callback: Optional[ProgressCallback] = None) -> CrackResult:
        """
        Run a wordlist attack against hash_str.

        Raises InvalidTargetError for a malformed target and SourceIOError when
        the wordlist cannot be read. Exhausting the wordlist is not an error:
        the result has found=False.
        """
        target, algo = normalize_target(hash_str, algorithm or self.algorithm)
        if not wordlist:
            raise ValueError("wordlist is required for wordlist cracking.")
        if not os.path.isfile(wordlist):
            raise SourceIOError(wordlist, FileNotFoundError(f"No such file: {wordlist}"))

        total = count_lines(wordlist) if self.count_total else None
        tracker = ProgressTracker(total=total, interval=self.progress_interval,
                                  callback=progress_callback, timeout=self.timeout)
        logger.info("Starting wordlist attack using %s with %s (%d worker%s)",
                    wordlist, algo, self.workers, "" if self.workers == 1 else "s")

        start = time.monotonic()
        candidates = iter_candidates(wordlist)
        if self.workers <= 1:
            result = find_first_match(candidates, target, algo, tracker=tracker)
        else:
            result = find_first_match_parallel(candidates, target, algo, workers=self.workers,
                                               chunk_size=self.chunk_size, tracker=tracker)
        if not result.found and tracker.total is None:
            # Exhausted: every line was read, so the count is now known
            tracker.total = tracker.attempts
        tracker.finish()

        result.wordlist = wordlist
        result.elapsed = time.monotonic() - start
        return result


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hashcrack",
        description="Hash Cracker - dictionary attack against a single hex digest.",
        epilog="Warning: Authorized testing only. Ensure you have explicit permission to test targets.",
    )
    parser.add_argument("--hash", "-H", dest="hash_str", required=True, help="Target hash string to crack.")
    parser.add_argument("--wordlist", "-w", dest="wordlist", help="Path to wordlist file.")
    parser.add_argument("--algo", "-a", dest="algo", choices=SUPPORTED_ALGOS, help="Hash algorithm. If omitted, auto-detect.")
    parser.add_argument("--workers", "-j", type=int, help="Worker threads (1 = sequential scan).")
    parser.add_argument("--chunk-size", type=int, help="Candidates handed to a worker at a time.")
    parser.add_argument("--config", "-c", help="YAML config file (default: $HASHCRACK_CONFIG).")
    parser.add_argument("--timeout", type=float, help="Abort the scan after this many seconds.")
    parser.add_argument("--progress-interval", type=float, help="Seconds between progress updates.")
    parser.add_argument("--count", dest="count_total", action="store_true", default=None,
                        help="Count wordlist lines first to report percent complete.")
    parser.add_argument("--detect", action="store_true", help="Only detect and print the hash algorithm, then exit.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only warnings and errors on stderr.")
    parser.add_argument("--version", action="version", version="hashcrack 1.0")
    return parser.parse_args(argv)


def _setup_logging(level: str, verbose: bool, quiet: bool) -> None:
    if verbose:
        lvl = logging.DEBUG
    elif quiet:
        lvl = logging.WARNING
    else:
        lvl = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(stream=sys.stderr, level=lvl, format="%(asctime)s %(levelname)s: %(message)s")


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)

    try:
        cfg = load_config(args.config, overrides={
            "algorithm": args.algo,
            "workers": args.workers,
            "chunk_size": args.chunk_size,
            "timeout": args.timeout,
            "progress_interval": args.progress_interval,
            "count_total": args.count_total,
        })
    except (OSError, ValueError) as ex:
        eprint(f"Error: invalid configuration: {ex}")
        return EXIT_ERROR

    _setup_logging(cfg.log_level, args.verbose, args.quiet)
    eprint("Ethical warning: Use this tool ONLY for authorized security testing. Unauthorized use may be illegal.")

    try:
        target, algo = normalize_target(args.hash_str, cfg.algorithm)
    except (InvalidTargetError, UnsupportedAlgorithmError) as ex:
        eprint(f"Error: {ex}")
        return EXIT_ERROR
    if not cfg.algorithm:
        logger.info("Detected algorithm: %s", algo)

    if args.detect:
        print(algo)
        return EXIT_FOUND

    if not args.wordlist:
        eprint("Error: --wordlist is required for a wordlist attack.")
        return EXIT_ERROR

    cracker = HashCracker.from_config(cfg)
    try:
        result = cracker.crack(target, args.wordlist, algorithm=algo)
    except SourceIOError as ex:
        eprint(f"Error: {ex}")
        return EXIT_ERROR
    except ScanTimeoutError as ex:
        eprint(f"Error: {ex}")
        return EXIT_TIMEOUT
    except CrackError as ex:
        eprint(f"Error: {ex}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        eprint("\nInterrupted by user.")
        return EXIT_INTERRUPTED

    if result.found:
        print(f"Cracked: {result.password}")
        eprint(f"Success in {result.elapsed:.2f}s (line {result.line_number}, {result.attempts} attempts)")
        return EXIT_FOUND
    eprint(f"Not cracked: no candidate in {result.wordlist} hashes to {result.target} "
           f"({result.attempts} tried in {result.elapsed:.2f}s).")
    return EXIT_NOT_FOUND


if __name__ == "__main__":
    sys.exit(main())
