"""
Identifier Generator

Generates random ids over the configured alphabet and length.
Uses the secrets module so ids are not predictable from each other.
Uniqueness is not checked here: the store rejects collisions on insert.
"""

import secrets


def generate_identifier(alphabet: str, length: int) -> str:
    """
    Generate a random id.

    Args:
        alphabet: Characters to draw from (must be non-empty)
        length: Number of characters (must be positive)

    Returns:
        A random string of ``length`` characters from ``alphabet``
    """
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    if length <= 0:
        raise ValueError(f"length must be positive, got {length}")
    return "".join(secrets.choice(alphabet) for _ in range(length))
