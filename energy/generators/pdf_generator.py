"""Generate energy report PDFs using reportlab."""

from __future__ import annotations

import base64
import io
from typing import Any, List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from ..config import EnergyConfig
from ..formatting import format_change, format_co2, format_currency, format_energy
from ..schema import EnergyReport
from ..telemetry import get_logger

_logger = get_logger(__name__)

_ACCENT = "#4361ee"


class PDFGenerator:
    """Create PDF energy reports: KPI table, monthly table and charts.

    Args:
        config: Energy configuration (chart embedding, chart size).
    """

    def __init__(self, config: Optional[EnergyConfig] = None) -> None:
        self.config = config or EnergyConfig()

    def generate(self, report: EnergyReport) -> bytes:
        """Render *report* as PDF bytes."""
        buf = io.BytesIO()
        doc = SimpleDocTemplate(
            buf,
            pagesize=A4,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title="Energy Report",
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "ReportTitle", parent=styles["Title"], fontSize=18, spaceAfter=12,
        )
        heading_style = ParagraphStyle(
            "SectionHeading",
            parent=styles["Heading2"],
            fontSize=13,
            spaceAfter=8,
            spaceBefore=16,
            textColor=colors.HexColor(_ACCENT),
        )
        body_style = styles["BodyText"]

        meta = report.metadata
        cur = report.current
        cmp_ = report.comparison
        elements: List[Any] = []

        elements.append(Paragraph(meta.building_name or "Energy Report", title_style))
        elements.append(Paragraph(
            f"<b>Period:</b> {meta.period_start.isoformat()} to {meta.period_end.isoformat()} "
            f"&bull; <b>Generated:</b> {meta.generated_at.strftime('%Y-%m-%d %H:%M')} UTC",
            body_style,
        ))
        elements.append(Spacer(1, 12))

        elements.append(Paragraph("Key Figures", heading_style))
        kpi_rows = [
            ["Metric", "Value", "Change"],
            ["Total Energy", format_energy(cur.total_energy), format_change(cmp_.energy_change)],
            ["Total Cost", format_currency(cur.total_cost, meta.currency), format_change(cmp_.cost_change)],
            ["Total CO2", format_co2(cur.total_co2), format_change(cmp_.co2_change)],
            ["Average Daily Usage", format_energy(cur.avg_daily_usage), ""],
            ["Peak Usage", format_energy(cur.peak_usage), ""],
            ["Anomalies Detected", str(report.anomaly_count), ""],
        ]
        if cur.weather_normalized_usage is not None:
            kpi_rows.append(
                ["Weather Normalized Usage", format_energy(cur.weather_normalized_usage), ""],
            )
        if report.temperature_correlation is not None:
            kpi_rows.append(
                ["Temperature Correlation", f"{report.temperature_correlation:.2f}", ""],
            )
        elements.append(self._make_table(kpi_rows))

        if report.monthly:
            elements.append(Paragraph("Monthly Breakdown", heading_style))
            rows: List[List[str]] = [["Month", "Energy", "Cost", "CO2", "Efficiency"]]
            for m in report.monthly:
                rows.append([
                    m.label,
                    format_energy(m.energy),
                    format_currency(m.cost, meta.currency),
                    format_co2(m.co2),
                    "" if m.efficiency is None else f"{m.efficiency * 100:.1f}%",
                ])
            elements.append(self._make_table(rows))

        if self.config.include_charts and report.visualizations:
            elements.append(Paragraph("Charts", heading_style))
            width = 170 * mm
            height = width * self.config.chart_height / self.config.chart_width
            for encoded in report.visualizations.values():
                img = io.BytesIO(base64.b64decode(encoded))
                elements.append(Image(img, width=width, height=height))
                elements.append(Spacer(1, 8))

        doc.build(elements)
        return buf.getvalue()

    @staticmethod
    def _make_table(data: List[List[str]]) -> Table:
        t = Table(data, hAlign="LEFT")
        t.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(_ACCENT)),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, 0), 9),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cccccc")),
                    ("FONTSIZE", (0, 1), (-1, -1), 8),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f8f9fa")]),
                    ("TOPPADDING", (0, 1), (-1, -1), 4),
                    ("BOTTOMPADDING", (0, 1), (-1, -1), 4),
                ]
            )
        )
        return t
