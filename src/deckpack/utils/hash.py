"""SHA-256 hashing utilities."""

import hashlib
import re

_HASH_PATTERN = re.compile(r"^[a-f0-9]{64}$")


def hash_bytes(data: bytes) -> str:
    """
    Compute the SHA-256 digest of binary data.

    Args:
        data: The bytes to hash.

    Returns:
        The 64-character lowercase hexadecimal digest.
    """
    return hashlib.sha256(data).hexdigest()


def verify_hash(data: bytes, expected_hash: str) -> bool:
    """Check that data hashes to the expected digest."""
    return hash_bytes(data) == expected_hash.lower()


def is_valid_hash(value: str) -> bool:
    """Check that a string is a lowercase SHA-256 hex digest."""
    return bool(_HASH_PATTERN.match(value))
