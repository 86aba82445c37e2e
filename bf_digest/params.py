"""Standard Bloom filter sizing formulas.

For ``n`` expected items and a target false positive rate ``p``::

    m = -n * ln(p) / (ln 2)^2
    k = (m / n) * ln 2
    p ~= (1 - e^(-k*n/m))^k
"""
from __future__ import annotations

import math

from .errors import InvalidArgumentError


def optimal_size(capacity: int, error_rate: float) -> int:
    """Number of bits needed to hold ``capacity`` items at ``error_rate``."""
    if capacity <= 0:
        raise InvalidArgumentError("capacity must be positive")
    if not 0 < error_rate < 1:
        raise InvalidArgumentError("error_rate must be between 0 and 1")
    return max(1, math.ceil(-capacity * math.log(error_rate) / (math.log(2) ** 2)))


def optimal_num_hashes(size: int, capacity: int) -> int:
    """Hash function count minimising the false positive rate."""
    if size <= 0:
        raise InvalidArgumentError("size must be positive")
    if capacity <= 0:
        raise InvalidArgumentError("capacity must be positive")
    return max(1, round((size / capacity) * math.log(2)))


def false_positive_rate(size: int, num_hashes: int, count: int) -> float:
    """Theoretical false positive rate after ``count`` distinct insertions."""
    if size <= 0:
        raise InvalidArgumentError("size must be positive")
    if num_hashes <= 0:
        raise InvalidArgumentError("num_hashes must be positive")
    if count < 0:
        raise InvalidArgumentError("count must not be negative")
    return (1.0 - math.exp(-num_hashes * count / size)) ** num_hashes
