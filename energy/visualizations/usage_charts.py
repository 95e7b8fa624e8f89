"""Usage charts — daily consumption with anomalies highlighted, monthly bars."""

from __future__ import annotations

import base64
import io
from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.dates as mdates  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402

from ..config import EnergyConfig  # noqa: E402
from ..schema import DailyAnalytics, MonthlyBreakdown  # noqa: E402

_LINE_COLOR = "#4361ee"
_NORMALIZED_COLOR = "#2a9d8f"
_ANOMALY_COLOR = "#e63946"

METRIC_LABELS = {
    "kwh": "Energy (kWh)",
    "cost": "Cost",
    "co2": "CO2 (kg)",
}


class UsageCharts:
    """Render energy charts as PNG.

    Args:
        config: Energy configuration (chart size and DPI).
    """

    def __init__(self, config: Optional[EnergyConfig] = None) -> None:
        self.config = config or EnergyConfig()

    def daily_usage_png(
        self,
        rows: Sequence[DailyAnalytics],
        metric: str = "kwh",
        title: str = "Daily Energy Usage",
        show_normalized: bool = True,
    ) -> bytes:
        """Line chart of *metric* per day; anomalous days get a red marker.

        Args:
            rows: Daily analytics rows in date order.
            metric: ``kwh``, ``cost`` or ``co2``.
            title: Chart title.
            show_normalized: Overlay weather-normalised usage (kWh only).

        Returns:
            PNG bytes.
        """
        if metric not in METRIC_LABELS:
            raise ValueError(f"unknown metric {metric!r}")
        fig, ax = self._figure()

        if not rows:
            ax.text(0.5, 0.5, "Insufficient data", ha="center", va="center", fontsize=11)
            ax.axis("off")
        else:
            dates = [r.date for r in rows]
            values = [getattr(r, metric) for r in rows]
            ax.plot(dates, values, marker="o", color=_LINE_COLOR, linewidth=2, markersize=3,
                    label=METRIC_LABELS[metric])
            ax.fill_between(dates, values, alpha=0.1, color=_LINE_COLOR)

            if metric == "kwh" and show_normalized:
                normalized = [(r.date, r.normalized_usage) for r in rows if r.normalized_usage is not None]
                if normalized:
                    ax.plot([n[0] for n in normalized], [n[1] for n in normalized],
                            linestyle="--", color=_NORMALIZED_COLOR, linewidth=1.5,
                            label="Weather normalized")

            flagged = [(r.date, getattr(r, metric)) for r in rows if r.is_anomaly]
            if flagged:
                ax.scatter([f[0] for f in flagged], [f[1] for f in flagged],
                           color=_ANOMALY_COLOR, s=40, zorder=3, label="Anomaly")

            ax.xaxis.set_major_formatter(mdates.DateFormatter("%m/%d"))
            ax.set_ylabel(METRIC_LABELS[metric])
            ax.set_title(title, fontweight="bold")
            ax.legend(fontsize=7)
            ax.grid(True, alpha=0.3)
            fig.autofmt_xdate()

        return self._render(fig)

    def monthly_bars_png(
        self,
        months: Sequence[MonthlyBreakdown],
        title: str = "Monthly Energy Consumption",
    ) -> bytes:
        """Bar chart of monthly energy."""
        fig, ax = self._figure()
        if not months:
            ax.text(0.5, 0.5, "Insufficient data", ha="center", va="center", fontsize=11)
            ax.axis("off")
        else:
            labels = [m.label for m in months]
            ax.bar(labels, [m.energy for m in months], color=_LINE_COLOR, alpha=0.85)
            ax.set_ylabel("Energy (kWh)")
            ax.set_title(title, fontweight="bold")
            ax.grid(True, axis="y", alpha=0.3)
            plt.setp(ax.get_xticklabels(), rotation=30, ha="right")
        return self._render(fig)

    def daily_usage_base64(self, rows: Sequence[DailyAnalytics], **kwargs: object) -> str:
        return self.to_base64(self.daily_usage_png(rows, **kwargs))  # type: ignore[arg-type]

    def monthly_bars_base64(self, months: Sequence[MonthlyBreakdown]) -> str:
        return self.to_base64(self.monthly_bars_png(months))

    @staticmethod
    def to_base64(png: bytes) -> str:
        return base64.b64encode(png).decode("ascii")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _figure(self):  # type: ignore[no-untyped-def]
        return plt.subplots(
            figsize=(
                self.config.chart_width / self.config.chart_dpi,
                self.config.chart_height / self.config.chart_dpi,
            ),
            dpi=self.config.chart_dpi,
        )

    @staticmethod
    def _render(fig: object) -> bytes:
        buf = io.BytesIO()
        fig.tight_layout()  # type: ignore[union-attr]
        fig.savefig(buf, format="png", bbox_inches="tight")  # type: ignore[union-attr]
        plt.close(fig)  # type: ignore[arg-type]
        return buf.getvalue()
