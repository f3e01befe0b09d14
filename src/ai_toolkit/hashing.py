"""Content fingerprints for identical-content detection."""

from __future__ import annotations

import hashlib


def content_hash(content: str) -> str:
    """Get SHA256 hash of text content.

    Args:
        content: Text to hash (encoded as UTF-8).

    Returns:
        Hex digest of the SHA256 hash.
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def is_same_content(first: str, second: str) -> bool:
    """Check whether two texts have the same fingerprint."""
    return content_hash(first) == content_hash(second)
