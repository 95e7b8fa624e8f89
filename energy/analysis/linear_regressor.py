"""Ordinary least-squares regression over (x, y) samples."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from .errors import DegenerateInputError, InsufficientDataError, InvalidInputError


@dataclass(frozen=True)
class RegressionLine:
    """Best-fit line ``y = slope * x + intercept``."""

    slope: float
    intercept: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


class LinearRegressor:
    """Fit a least-squares line through paired samples.

    Unlike a bare formula, a zero denominator is never turned into
    ``NaN``/``inf``: fewer than two points raise
    :class:`InsufficientDataError` and a constant *x* raises
    :class:`DegenerateInputError`.

    Example::

        line = LinearRegressor().fit([(1, 2), (2, 4), (3, 6)])
        line.slope      # 2.0
        line.intercept  # 0.0
    """

    def fit(self, points: Sequence[Tuple[float, float]]) -> RegressionLine:
        """Fit the line through *points*.

        Args:
            points: ``(x, y)`` pairs.

        Returns:
            The fitted :class:`RegressionLine`.

        Raises:
            InsufficientDataError: Fewer than two points.
            DegenerateInputError: Every x value is identical.
        """
        n = len(points)
        if n < 2:
            raise InsufficientDataError(
                f"linear regression needs at least 2 points, got {n}"
            )

        mean_x = math.fsum(p[0] for p in points) / n
        mean_y = math.fsum(p[1] for p in points) / n
        s_xx = math.fsum((p[0] - mean_x) ** 2 for p in points)
        s_xy = math.fsum((p[0] - mean_x) * (p[1] - mean_y) for p in points)

        first_x = points[0][0]
        if s_xx == 0 or all(p[0] == first_x for p in points):
            raise DegenerateInputError(
                "linear regression is undefined when all x values are identical"
            )

        slope = s_xy / s_xx
        intercept = mean_y - slope * mean_x
        return RegressionLine(slope=slope, intercept=intercept)

    def fit_xy(
        self,
        xs: Sequence[float],
        ys: Sequence[float],
    ) -> RegressionLine:
        """Fit the line through two index-aligned series.

        Raises:
            InvalidInputError: The series differ in length.
        """
        if len(xs) != len(ys):
            raise InvalidInputError(
                f"x and y series differ in length ({len(xs)} != {len(ys)})"
            )
        return self.fit(list(zip(xs, ys)))

    @staticmethod
    def r_squared(
        points: Sequence[Tuple[float, float]],
        line: RegressionLine,
    ) -> float:
        """Coefficient of determination (R²) of *line* over *points*.

        A constant y series is fitted perfectly and scores ``1.0``.
        """
        n = len(points)
        if n == 0:
            return 0.0
        mean_y = math.fsum(p[1] for p in points) / n
        ss_tot = math.fsum((p[1] - mean_y) ** 2 for p in points)
        ss_res = math.fsum((p[1] - line.predict(p[0])) ** 2 for p in points)
        if ss_tot == 0:
            return 1.0
        return 1.0 - ss_res / ss_tot
