"""Anomaly detection — flag readings that stray too far from the series mean."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence


class AnomalyDetector:
    """Classify each reading as anomalous relative to the series baseline.

    The baseline is the arithmetic mean of the whole series.  A reading is
    anomalous when its deviation from the baseline, expressed as a
    percentage of the baseline, is strictly greater than the threshold.

    When the baseline is exactly zero the percentage is undefined; any
    non-zero reading is then treated as infinitely deviant (anomalous) and
    a zero reading as not deviating at all.

    Args:
        threshold: Default relative deviation in percent.  Defaults to ``20``.
    """

    def __init__(self, threshold: float = 20.0) -> None:
        if threshold < 0:
            raise ValueError("threshold must be >= 0")
        self._threshold = threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    def detect(
        self,
        readings: Sequence[float],
        threshold: Optional[float] = None,
    ) -> List[bool]:
        """Return one flag per reading, in input order.

        Args:
            readings: Numeric series (kWh per day, typically).
            threshold: Per-call override of the relative threshold (percent).

        Returns:
            List of booleans with the same length as *readings*.  Series
            shorter than two readings are never anomalous.

        Raises:
            ValueError: *threshold* is negative.
        """
        limit = self._threshold if threshold is None else threshold
        if limit < 0:
            raise ValueError("threshold must be >= 0")
        return [dev > limit for dev in self.deviations(readings)]

    def deviations(self, readings: Sequence[float]) -> List[float]:
        """Deviation of every reading from the mean, in percent of the mean.

        Series shorter than two readings yield ``0.0`` for each element.
        """
        n = len(readings)
        if n < 2:
            return [0.0] * n

        baseline = math.fsum(readings) / n
        if baseline == 0:
            return [0.0 if r == 0 else math.inf for r in readings]

        scale = abs(baseline)
        return [abs(r - baseline) / scale * 100.0 for r in readings]

    def scores(self, readings: Sequence[float]) -> List[float]:
        """Anomaly score per reading in ``[0, 1]`` (100 % deviation saturates)."""
        return [min(1.0, dev / 100.0) for dev in self.deviations(readings)]

    def baseline(self, readings: Sequence[float]) -> Optional[float]:
        """Mean of *readings*, or ``None`` for an empty series."""
        if not readings:
            return None
        return math.fsum(readings) / len(readings)
