"""Tests for the sizing formulas."""
import math

import pytest

from bf_digest.errors import InvalidArgumentError
from bf_digest.params import false_positive_rate, optimal_num_hashes, optimal_size


def test_optimal_size():
    assert optimal_size(1000, 0.01) == 9586
    assert optimal_size(1, 0.5) >= 1


def test_optimal_num_hashes():
    assert optimal_num_hashes(9586, 1000) == 7
    assert optimal_num_hashes(1, 1000) == 1


def test_false_positive_rate():
    assert false_positive_rate(1000, 4, 0) == 0
    expected = (1 - math.exp(-0.4)) ** 4
    assert false_positive_rate(1000, 4, 100) == pytest.approx(expected)
    assert false_positive_rate(1000, 4, 100) == pytest.approx(0.0118, abs=1e-4)


@pytest.mark.parametrize(
    "call",
    [
        lambda: optimal_size(0, 0.1),
        lambda: optimal_size(10, 0),
        lambda: optimal_size(10, 1),
        lambda: optimal_num_hashes(0, 10),
        lambda: optimal_num_hashes(10, 0),
        lambda: false_positive_rate(0, 1, 1),
        lambda: false_positive_rate(10, 0, 1),
        lambda: false_positive_rate(10, 1, -1),
    ],
)
def test_invalid_inputs(call):
    with pytest.raises(InvalidArgumentError):
        call()
