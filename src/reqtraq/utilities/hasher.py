"""Hasher - Content hashes for change detection of code files.

Hashes follow git's blob convention, so a file's hash equals the output
of `git hash-object <file>` and can be compared with repository history.
"""

import hashlib
from pathlib import Path


def git_blob_hash(content: bytes) -> str:
    """Calculate the git blob hash of raw file content.

    The hash input is framed as b"blob <byte length>\\0" followed by the
    content itself.

    Args:
        content: Raw file bytes

    Returns:
        40-character hexadecimal SHA-1 digest
    """
    hash_obj = hashlib.sha1(f"blob {len(content)}".encode("ascii"))
    hash_obj.update(b"\0")
    hash_obj.update(content)
    return hash_obj.hexdigest()


def hash_file(path: Path) -> str:
    """Calculate the git blob hash of a file on disk."""
    return git_blob_hash(path.read_bytes())


def verify_hash(content: bytes, expected_hash: str) -> bool:
    """Verify that content matches an expected git blob hash.

    Args:
        content: Raw file bytes
        expected_hash: Expected hash value (case-insensitive)

    Returns:
        True if hash matches, False otherwise
    """
    return git_blob_hash(content) == expected_hash.lower()
