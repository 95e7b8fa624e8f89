"""Tests for energy.ingest.csv_parser."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from energy.ingest.csv_parser import parse_energy_csv, parse_timestamp, template_csv


HEADER = "timestamp,kWh,cost,co2,source\n"


class TestParseTimestamp:
    def test_zulu_suffix(self) -> None:
        assert parse_timestamp("2024-01-01T00:00:00Z") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_naive(self) -> None:
        assert parse_timestamp("2024-01-01 06:30:00") == datetime(2024, 1, 1, 6, 30)

    @pytest.mark.parametrize("value", ["", "yesterday", "2024-13-01"])
    def test_invalid(self, value: str) -> None:
        assert parse_timestamp(value) is None


class TestParseEnergyCSV:
    def test_valid_rows(self) -> None:
        result = parse_energy_csv(
            HEADER
            + "2024-01-01T00:00:00Z,125.5,15.06,50.2,Main Meter\n"
            + "2024-01-01T01:00:00Z,118.3,14.20,,\n"
        )
        assert result.errors == []
        assert len(result.data) == 2
        first, second = result.data
        assert first.kwh == pytest.approx(125.5)
        assert first.source == "Main Meter"
        assert second.co2 == 0.0
        assert second.source == "Manual Upload"

    def test_row_errors_are_numbered(self) -> None:
        result = parse_energy_csv(
            HEADER
            + "2024-01-01T00:00:00Z,100,10,,\n"
            + ",100,10,,\n"
            + "not-a-date,100,10,,\n"
            + "2024-01-01T03:00:00Z,abc,10,,\n"
        )
        assert len(result.data) == 1
        assert result.errors == [
            "Row 2: Missing required fields (timestamp, kWh, cost)",
            "Row 3: Invalid timestamp format",
            "Row 4: Invalid numeric values",
        ]

    def test_invalid_co2_rejected(self) -> None:
        result = parse_energy_csv(HEADER + "2024-01-01T00:00:00Z,100,10,lots,\n")
        assert result.errors == ["Row 1: Invalid numeric values"]

    def test_empty_lines_skipped(self) -> None:
        result = parse_energy_csv(
            HEADER + "\n2024-01-01T00:00:00Z,100,10,,\n,,,,\n2024-01-01T01:00:00Z,90,9,,\n"
        )
        assert len(result.data) == 2
        assert result.errors == []

    def test_headers_case_insensitive(self) -> None:
        result = parse_energy_csv("Timestamp,KWH,Cost\n2024-01-01T00:00:00Z,1,2\n")
        assert len(result.data) == 1
        assert result.data[0].cost == 2.0

    def test_byte_order_mark(self) -> None:
        result = parse_energy_csv("\ufeff" + HEADER + "2024-01-01T00:00:00Z,1,2,,\n")
        assert len(result.data) == 1

    def test_preview_limited(self) -> None:
        rows = "".join(f"2024-01-01T{h:02d}:00:00Z,{h},1,,\n" for h in range(10))
        result = parse_energy_csv(HEADER + rows, preview_rows=3)
        assert len(result.data) == 10
        assert [r.kwh for r in result.preview] == [0.0, 1.0, 2.0]

    def test_header_only(self) -> None:
        result = parse_energy_csv(HEADER)
        assert result.data == [] and result.errors == []


class TestTemplate:
    def test_template_parses_cleanly(self) -> None:
        text = template_csv()
        assert text.splitlines()[0] == "timestamp,kWh,cost,co2,source"
        result = parse_energy_csv(text)
        assert len(result.data) == 3
        assert result.errors == []
