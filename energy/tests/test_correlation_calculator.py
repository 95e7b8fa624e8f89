"""Tests for energy.analysis.correlation_calculator."""

from __future__ import annotations

import pytest

from energy.analysis.correlation_calculator import CorrelationCalculator
from energy.analysis.errors import InsufficientDataError, InvalidInputError


@pytest.fixture
def calc() -> CorrelationCalculator:
    return CorrelationCalculator()


class TestPearson:
    def test_perfect_positive(self, calc: CorrelationCalculator) -> None:
        assert calc.pearson([1, 2, 3, 4, 5], [2, 4, 6, 8, 10]) == pytest.approx(1.0)

    def test_perfect_negative(self, calc: CorrelationCalculator) -> None:
        assert calc.pearson([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)

    def test_partial(self, calc: CorrelationCalculator) -> None:
        r = calc.pearson([1, 2, 3, 4], [2, 1, 4, 3])
        assert r == pytest.approx(0.6)

    @pytest.mark.parametrize("offset", [1e7, 1e8])
    def test_large_offset_exact_line(self, calc: CorrelationCalculator, offset: float) -> None:
        a = [offset + i for i in range(1, 5)]
        assert calc.pearson(a, [1, 2, 3, 4]) == pytest.approx(1.0, abs=1e-12)

    def test_symmetric(self, calc: CorrelationCalculator) -> None:
        a, b = [3.1, 4.7, 1.2, 9.9], [10.0, 12.5, 8.1, 20.2]
        assert calc.pearson(a, b) == pytest.approx(calc.pearson(b, a))

    def test_result_is_clamped(self, calc: CorrelationCalculator) -> None:
        a = [0.1 * i for i in range(50)]
        r = calc.pearson(a, [3 * x + 7 for x in a])
        assert r is not None
        assert -1.0 <= r <= 1.0


class TestUndefined:
    @pytest.mark.parametrize(
        "a, b",
        [([1, 1, 1], [1, 2, 3]), ([1, 2, 3], [4, 4, 4]), ([0.1, 0.1, 0.1], [0.1, 0.1, 0.1])],
    )
    def test_constant_series_returns_none(
        self, calc: CorrelationCalculator, a: list, b: list,
    ) -> None:
        assert calc.pearson(a, b) is None


class TestInvalid:
    def test_mismatched_lengths(self, calc: CorrelationCalculator) -> None:
        with pytest.raises(InvalidInputError):
            calc.pearson([1, 2, 3], [1, 2])

    @pytest.mark.parametrize("a, b", [([], []), ([1.0], [2.0])])
    def test_fewer_than_two(self, calc: CorrelationCalculator, a: list, b: list) -> None:
        with pytest.raises(InsufficientDataError):
            calc.pearson(a, b)


class TestPurity:
    def test_idempotent_and_input_untouched(self, calc: CorrelationCalculator) -> None:
        a, b = [5.0, 3.0, 8.0, 1.0], [2.0, 2.5, 4.0, 0.5]
        snap_a, snap_b = list(a), list(b)
        assert calc.pearson(a, b) == calc.pearson(a, b)
        assert (a, b) == (snap_a, snap_b)


class TestDescribe:
    @pytest.mark.parametrize(
        "r, label",
        [
            (None, "undefined"),
            (0.05, "none"),
            (-0.82, "strong negative"),
            (0.7, "strong positive"),
            (0.5, "moderate positive"),
            (-0.2, "weak negative"),
        ],
    )
    def test_labels(self, r, label: str) -> None:
        assert CorrelationCalculator.describe(r) == label
