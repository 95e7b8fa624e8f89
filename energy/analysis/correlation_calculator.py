"""Pearson correlation between two paired numeric series."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from .errors import InsufficientDataError, InvalidInputError


class CorrelationCalculator:
    """Compute the Pearson product-moment correlation coefficient.

    A constant series has no variance and the coefficient is undefined
    (0/0).  :meth:`pearson` reports that case as ``None`` so callers cannot
    mistake it for a number.
    """

    def pearson(
        self,
        a: Sequence[float],
        b: Sequence[float],
    ) -> Optional[float]:
        """Pearson r between *a* and *b*.

        Formula (mean-centred, equal to the raw-sum form):
            r = Σ(x − x̄)(y − ȳ) / √[Σ(x − x̄)² · Σ(y − ȳ)²]

        Args:
            a: First series.
            b: Second series, index-aligned with *a*.

        Returns:
            r clamped to ``[-1, 1]``, or ``None`` when either series is
            constant.

        Raises:
            InvalidInputError: The series differ in length.
            InsufficientDataError: Fewer than two paired observations.
        """
        if len(a) != len(b):
            raise InvalidInputError(
                f"series differ in length ({len(a)} != {len(b)})"
            )
        n = len(a)
        if n < 2:
            raise InsufficientDataError(
                f"correlation needs at least 2 observations, got {n}"
            )

        if min(a) == max(a) or min(b) == max(b):
            return None

        mean_x = math.fsum(a) / n
        mean_y = math.fsum(b) / n
        s_xx = math.fsum((x - mean_x) ** 2 for x in a)
        s_yy = math.fsum((y - mean_y) ** 2 for y in b)
        s_xy = math.fsum((x - mean_x) * (y - mean_y) for x, y in zip(a, b))
        if s_xx == 0 or s_yy == 0:
            return None

        r = s_xy / math.sqrt(s_xx * s_yy)
        return max(-1.0, min(1.0, r))

    @staticmethod
    def describe(r: Optional[float]) -> str:
        """Human-readable strength and direction of *r*.

        Example::

            >>> CorrelationCalculator.describe(-0.82)
            'strong negative'
        """
        if r is None:
            return "undefined"
        strength = abs(r)
        if strength < 0.1:
            return "none"
        direction = "positive" if r > 0 else "negative"
        if strength >= 0.7:
            return f"strong {direction}"
        if strength >= 0.4:
            return f"moderate {direction}"
        return f"weak {direction}"
