"""Tests for integration.logger — structlog setup and command context."""

from __future__ import annotations

import structlog

from integration.logger import _add_correlation_id, command_context, get_logger, setup_logging


class TestCommandContext:
    def test_binds_and_unbinds(self) -> None:
        with command_context("analyze", building=3) as cid:
            assert len(cid) == 12
            bound = structlog.contextvars.get_contextvars()
            assert bound["command"] == "analyze"
            assert bound["building"] == 3
            assert _add_correlation_id(None, "info", {})["correlation_id"] == cid
        assert "command" not in structlog.contextvars.get_contextvars()
        assert "correlation_id" not in _add_correlation_id(None, "info", {})

    def test_fresh_id_per_command(self) -> None:
        with command_context("report") as first:
            pass
        with command_context("report") as second:
            pass
        assert first != second


class TestGetLogger:
    def test_writes_to_current_stderr(self, capsys) -> None:  # type: ignore[no-untyped-def]
        setup_logging("WARNING", json_output=True)
        with command_context("import-csv"):
            get_logger("cli.test").warning("csv_imported", inserted=4)
        err = capsys.readouterr().err
        assert "csv_imported" in err
        assert "import-csv" in err
