"""Constant-time secret comparison."""

import hashlib
import hmac


def _digest(value: str | bytes) -> bytes:
    if isinstance(value, str):
        value = value.encode("utf-8")
    return hashlib.sha256(value).digest()


def secret_equal(candidate: str | bytes | None, expected: str | bytes | None) -> bool:
    """Compare two secrets without leaking where, or whether by length, they differ.

    Both sides are hashed first so ``compare_digest`` always walks two 32-byte
    digests, whatever the input lengths.
    """
    if candidate is None or expected is None:
        return False
    return hmac.compare_digest(_digest(candidate), _digest(expected))
