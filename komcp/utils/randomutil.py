"""Random number and string generators."""

from __future__ import annotations

import random

CHARSET = "abcdefghijklmnopqrstuvwxyz0123456789"


def rand_n_digit_int(n: int) -> int:
    """Return a random integer with exactly ``n`` digits, or 0 if ``n <= 0``."""
    if n <= 0:
        return 0
    return random.randint(10 ** (n - 1), 10**n - 1)


def rand_n_length_string(n: int) -> str:
    """Return a random lower-case alphanumeric string of length ``n``."""
    if n <= 0:
        return ""
    return "".join(random.choices(CHARSET, k=n))