"""Alert evaluator — rule-based alerts from daily analytics and building thresholds."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..schema import (
    AlertRecord,
    AlertSeverity,
    AlertThresholds,
    AlertType,
    CURRENCIES,
    DailyAnalytics,
    NotificationSettings,
)
from ..telemetry import get_logger

_logger = get_logger(__name__)

# A reading this many times over its threshold escalates to critical.
CRITICAL_FACTOR = 1.5


class AlertEvaluator:
    """Turn daily analytics into alerts.

    Rules:

    * **high usage** — daily kWh above ``high_usage_alert``;
    * **anomaly** — flagged day whose anomaly score reaches ``anomaly_score``;
    * **cost** — daily cost above ``cost_alert``.

    The building's *anomaly alerts* switch governs the first two rules and
    its *cost thresholds* switch the last one.  All rules are deterministic.
    """

    def evaluate(
        self,
        rows: Sequence[DailyAnalytics],
        thresholds: Optional[AlertThresholds] = None,
        notifications: Optional[NotificationSettings] = None,
        building_id: Optional[int] = None,
        currency_symbol: str = "€",
    ) -> List[AlertRecord]:
        """Evaluate every row against the thresholds.

        Args:
            rows: Daily analytics rows.
            thresholds: Alert thresholds (defaults when omitted).
            notifications: Notification switches (all on when omitted).
            building_id: Building the alerts belong to.
            currency_symbol: Symbol used in cost messages.

        Returns:
            Alerts in row order.
        """
        thresholds = thresholds or AlertThresholds()
        notifications = notifications or NotificationSettings()
        alerts: List[AlertRecord] = []

        for row in rows:
            if notifications.anomaly_alerts:
                if row.kwh > thresholds.high_usage_alert:
                    alerts.append(AlertRecord(
                        building_id=building_id,
                        alert_type=AlertType.HIGH_USAGE,
                        severity=self._severity(row.kwh, thresholds.high_usage_alert),
                        message=(
                            f"Usage of {row.kwh:.1f} kWh on {row.date.isoformat()} "
                            f"exceeds {thresholds.high_usage_alert:.0f} kWh"
                        ),
                        value=row.kwh,
                        threshold=thresholds.high_usage_alert,
                        date=row.date,
                    ))
                if row.is_anomaly and row.anomaly_score >= thresholds.anomaly_score:
                    alerts.append(AlertRecord(
                        building_id=building_id,
                        alert_type=AlertType.ANOMALY,
                        severity=(
                            AlertSeverity.CRITICAL if row.anomaly_score >= 1.0
                            else AlertSeverity.WARNING
                        ),
                        message=(
                            f"Unusual consumption on {row.date.isoformat()} "
                            f"(anomaly score {row.anomaly_score:.2f})"
                        ),
                        value=row.anomaly_score,
                        threshold=thresholds.anomaly_score,
                        date=row.date,
                    ))
            if notifications.cost_thresholds and row.cost > thresholds.cost_alert:
                alerts.append(AlertRecord(
                    building_id=building_id,
                    alert_type=AlertType.COST,
                    severity=self._severity(row.cost, thresholds.cost_alert),
                    message=(
                        f"Daily cost of {currency_symbol}{row.cost:.2f} on "
                        f"{row.date.isoformat()} exceeds "
                        f"{currency_symbol}{thresholds.cost_alert:.2f}"
                    ),
                    value=row.cost,
                    threshold=thresholds.cost_alert,
                    date=row.date,
                ))

        if alerts:
            _logger.info("Raised %d alerts over %d days", len(alerts), len(rows))
        return alerts

    def evaluate_for_building(
        self, rows: Sequence[DailyAnalytics], building: Dict[str, Any],
    ) -> List[AlertRecord]:
        """Evaluate using the thresholds stored on a building dictionary."""
        return self.evaluate(
            rows,
            thresholds=AlertThresholds(**building["thresholds"]),
            notifications=NotificationSettings(**building["notifications"]),
            building_id=building["id"],
            currency_symbol=CURRENCIES.get(building.get("currency") or "EUR", "€"),
        )

    @staticmethod
    def _severity(value: float, threshold: float) -> AlertSeverity:
        if threshold > 0 and value >= threshold * CRITICAL_FACTOR:
            return AlertSeverity.CRITICAL
        return AlertSeverity.WARNING
