"""Utility helpers."""

from .hash import hash_bytes, is_valid_hash, verify_hash
from .logging import get_logger, setup_logging

__all__ = ["hash_bytes", "is_valid_hash", "verify_hash", "get_logger", "setup_logging"]
