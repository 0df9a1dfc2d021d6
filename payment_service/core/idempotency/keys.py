"""
Idempotency Key Validation

Client-supplied keys are opaque: they are checked, never rewritten.
"""

from typing import Optional

from payment_service.core.exceptions import (
    InvalidIdempotencyKeyError,
    MissingIdempotencyKeyError,
)

IDEMPOTENCY_HEADER = "Idempotency-Key"
REPLAY_HEADER = "Idempotent-Replayed"


def validate_idempotency_key(raw: Optional[str], max_length: int = 255) -> str:
    """
    Validate a client-supplied idempotency key.

    Args:
        raw: Header value as received, or None if absent
        max_length: Longest key the ledger can store

    Returns:
        The key, unchanged

    Raises:
        MissingIdempotencyKeyError: If the key is absent or blank
        InvalidIdempotencyKeyError: If the key is too long to store
    """
    if raw is None or not raw.strip():
        raise MissingIdempotencyKeyError()

    if len(raw) > max_length:
        raise InvalidIdempotencyKeyError(
            f"{IDEMPOTENCY_HEADER} must be at most {max_length} characters"
        )

    return raw
