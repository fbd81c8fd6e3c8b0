"""
Tests for the AuditLogger module.
"""

import csv
import io
import json

import pytest
from rich.console import Console

from writable_wmi.core.logger import AuditLogger, LogLevel
from writable_wmi.core.schema.models import CimType, WritablePropertyRecord


@pytest.fixture
def records():
    return [
        WritablePropertyRecord("Win32_OSRecoveryConfiguration", "DebugFilePath", CimType.STRING),
        WritablePropertyRecord("Win32_OSRecoveryConfiguration", "MiniDumpDirectory", CimType.STRING),
        WritablePropertyRecord("Win32_Environment", "VariableValue", CimType.STRING),
    ]


class TestAuditLogger:
    """Tests for AuditLogger class."""

    def test_emit_records_messages(self, logger):
        logger.emit(LogLevel.INFO, "hello")
        logger.emit(LogLevel.WARNING, "careful")

        assert logger.messages_at(LogLevel.INFO) == ["hello"]
        assert logger.messages_at(LogLevel.WARNING) == ["careful"]

    def test_debug_hidden_unless_verbose(self):
        """DEBUG messages are kept but only printed in verbose mode."""
        buffer = io.StringIO()
        quiet = AuditLogger(console=Console(file=buffer, width=200))

        quiet.emit(LogLevel.DEBUG, "details")
        quiet.emit(LogLevel.INFO, "progress")

        output = buffer.getvalue()
        assert "details" not in output
        assert "progress" in output
        assert quiet.messages_at(LogLevel.DEBUG) == ["details"]

    def test_verbose_prints_debug(self):
        buffer = io.StringIO()
        loud = AuditLogger(verbose=True, console=Console(file=buffer, width=200))

        loud.emit(LogLevel.DEBUG, "Listing all classes in root\\cimv2")

        assert "root\\cimv2" in buffer.getvalue()

    def test_markup_in_message_is_escaped(self):
        buffer = io.StringIO()
        log = AuditLogger(console=Console(file=buffer, width=200))

        log.emit(LogLevel.INFO, "qualifiers [write]")

        assert "[write]" in buffer.getvalue()

    def test_scan_summary(self, logger, records):
        logger.start_scan("cimv2-strings", namespace="root\\cimv2")
        logger.emit(LogLevel.WARNING, "something odd")
        logger.log_classes(4)
        logger.log_records(records)
        summary = logger.end_scan()

        assert summary.scan_name == "cimv2-strings"
        assert summary.classes_inspected == 4
        assert summary.total_matches == 3
        assert summary.matches_per_class == {
            "Win32_OSRecoveryConfiguration": 2,
            "Win32_Environment": 1,
        }
        assert summary.warnings == 1
        assert summary.completed_at is not None

    def test_summary_text(self, logger, records):
        """Classes are ranked by match count in the rendered summary."""
        logger.start_scan("cimv2-strings", namespace="root\\cimv2")
        logger.log_classes(2)
        logger.log_records(records)
        text = logger.end_scan().to_text()

        assert "root\\cimv2" in text
        assert "Classes inspected:" in text
        assert text.index("Win32_OSRecoveryConfiguration: 2") < text.index("Win32_Environment: 1")

    def test_summary_text_without_matches(self, logger):
        logger.start_scan("empty")
        text = logger.end_scan().to_text()

        assert "Writable matches:    0" in text
        assert "Matches per class" not in text

    def test_end_without_start(self, logger):
        with pytest.raises(RuntimeError):
            logger.end_scan()

    def test_export_json(self, logger, records, tmp_path):
        logger.start_scan("export")
        logger.log_records(records)
        logger.end_scan()

        path = logger.export(tmp_path / "out" / "writable.json")
        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["scan"] == "export"
        assert data["matches"][0] == {
            "class": "Win32_OSRecoveryConfiguration",
            "property": "DebugFilePath",
            "type": "String",
        }
        assert len(data["matches"]) == 3

    def test_export_csv(self, logger, records, tmp_path):
        logger.start_scan("export")
        logger.log_records(records)

        path = logger.export(tmp_path / "writable.CSV")

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))

        assert len(rows) == 3
        assert rows[2] == {
            "class": "Win32_Environment",
            "property": "VariableValue",
            "type": "String",
        }

    def test_start_scan_resets_records(self, logger, records):
        logger.start_scan("first")
        logger.log_records(records)
        logger.start_scan("second")

        assert logger.records == []
