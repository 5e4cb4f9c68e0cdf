"""Random codes for invitations, session joins and signature verification."""

import secrets
from typing import Callable


def generate_token(num_bytes: int) -> str:
    """URL-safe random token with num_bytes of entropy."""
    return secrets.token_urlsafe(num_bytes)


def generate_numeric_code(digits: int) -> str:
    """Zero-padded random numeric code, e.g. '048213'."""
    return f"{secrets.randbelow(10 ** digits):0{digits}d}"


def generate_unique_code(
    factory: Callable[[], str],
    exists: Callable[[str], bool],
    max_attempts: int = 5,
) -> str:
    """
    Draw codes from factory until one is not taken.

    Args:
        factory: Produces a candidate code
        exists: Returns True if the candidate is already in use
        max_attempts: Number of draws before giving up

    Returns:
        A code for which exists() returned False

    Raises:
        RuntimeError: If every attempt collided
    """
    for _ in range(max_attempts):
        candidate = factory()
        if not exists(candidate):
            return candidate
    raise RuntimeError(f"Could not generate a unique code after {max_attempts} attempts")
