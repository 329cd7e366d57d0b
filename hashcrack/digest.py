"""
Digest helpers: the hash primitive, its hex encoding and target validation.

Supported algorithms are the fixed-size hashlib digests:
- md5: 32 hex
- sha1: 40 hex
- sha224: 56 hex
- sha256: 64 hex
- sha384: 96 hex
- sha512: 128 hex
"""
import hashlib
import re
from typing import Optional, Tuple

from hashcrack.errors import InvalidTargetError, UnsupportedAlgorithmError


SUPPORTED_ALGOS = ["md5", "sha1", "sha224", "sha256", "sha384", "sha512"]

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


def check_algorithm(algorithm: str) -> str:
    """Return the canonical algorithm name or raise UnsupportedAlgorithmError."""
    algo = (algorithm or "").strip().lower()
    if algo not in SUPPORTED_ALGOS:
        raise UnsupportedAlgorithmError(f"Unsupported algorithm: {algorithm}")
    return algo


def digest_length(algorithm: str) -> int:
    """Length of the hex encoding of a digest for algorithm."""
    return hashlib.new(check_algorithm(algorithm)).digest_size * 2


def compute_digest(candidate: bytes, algorithm: str) -> bytes:
    return hashlib.new(check_algorithm(algorithm), candidate).digest()


def digest_hex(candidate: bytes, algorithm: str) -> str:
    # hashlib always emits lowercase hex
    return compute_digest(candidate, algorithm).hex()


_LENGTH_TO_ALGO = {hashlib.new(a).digest_size * 2: a for a in SUPPORTED_ALGOS}


def detect_hash_algorithm(hash_str: str) -> Optional[str]:
    """
    Detect hash algorithm from the length of a hex digest.
    Returns algo name or None if the string is not hex or the length is unknown.
    """
    if not hash_str:
        return None
    hs = hash_str.strip()
    if not _HEX_RE.match(hs):
        return None
    return _LENGTH_TO_ALGO.get(len(hs))


def normalize_target(hash_str: str, algorithm: Optional[str] = None) -> Tuple[str, str]:
    """
    Validate a target digest and return (lowercase_target, algorithm).

    When algorithm is omitted it is detected from the digest length.
    Raises InvalidTargetError for anything that is not a hex digest of the
    right size, UnsupportedAlgorithmError for an unknown algorithm name.
    """
    hs = (hash_str or "").strip()
    if not hs or not _HEX_RE.match(hs):
        raise InvalidTargetError(f"Invalid hash format: {hash_str!r} is not a hex digest")
    if algorithm:
        algo = check_algorithm(algorithm)
        expected = digest_length(algo)
        if len(hs) != expected:
            raise InvalidTargetError(
                f"Invalid hash format: {algo} digests are {expected} hex chars, got {len(hs)}"
            )
    else:
        algo = detect_hash_algorithm(hs)
        if not algo:
            raise InvalidTargetError(
                f"Invalid hash format: unable to detect algorithm for a {len(hs)}-char digest"
            )
    return hs.lower(), algo
