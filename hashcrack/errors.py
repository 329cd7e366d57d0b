"""Error types raised by the hash cracker.

Running out of candidates is not an error: the engine reports it as a
CrackResult with found=False.
"""
from typing import Optional


class CrackError(Exception):
    """Base class for all hash cracker failures."""


class InvalidTargetError(CrackError, ValueError):
    """Target digest is not a well-formed hex string for the algorithm."""


class UnsupportedAlgorithmError(CrackError, ValueError):
    pass


class SourceIOError(CrackError):
    """The wordlist could not be opened or a read failed partway."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to read wordlist {path}{detail}")


class ScanTimeoutError(CrackError):
    def __init__(self, timeout: float, attempts: int):
        self.timeout = timeout
        self.attempts = attempts
        super().__init__(f"Scan aborted after {timeout:.2f}s ({attempts} candidates tried)")
