"""
Audit Logger

Console logging and result export for enumeration runs.
"""

import csv
import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from writable_wmi.core.schema.models import WritablePropertyRecord


class LogLevel(Enum):
    """Log level for messages."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


class Emitter(Protocol):
    """Logging collaborator injected into the schema components."""

    def emit(self, level: LogLevel, message: str) -> None: ...


@dataclass
class LogMessage:
    """A single emitted message."""

    timestamp: str
    level: LogLevel
    message: str


@dataclass
class ScanSummary:
    """Summary of an enumeration run."""

    scan_name: str
    started_at: datetime
    completed_at: datetime | None = None
    namespace: str | None = None

    classes_inspected: int = 0
    total_matches: int = 0
    matches_per_class: dict[str, int] = field(default_factory=dict)
    warnings: int = 0
    errors: int = 0

    @property
    def duration(self) -> str:
        if not self.completed_at:
            return "In progress"
        delta = self.completed_at - self.started_at
        minutes = int(delta.total_seconds() // 60)
        seconds = delta.total_seconds() % 60
        return f"{minutes}m {seconds:.1f}s"

    def to_text(self) -> str:
        """Render the summary as aligned label/value lines."""
        rows = [("Scan", self.scan_name)]
        if self.namespace:
            rows.append(("Namespace", self.namespace))
        rows += [
            ("Classes inspected", f"{self.classes_inspected:,}"),
            ("Writable matches", f"{self.total_matches:,}"),
            ("Warnings", str(self.warnings)),
            ("Errors", str(self.errors)),
            ("Duration", self.duration),
        ]
        lines = [f"{label + ':':<20} {value}" for label, value in rows]

        ranked = sorted(self.matches_per_class.items(), key=lambda x: (-x[1], x[0]))
        if ranked:
            lines.append("")
            lines.append("Matches per class:")
            lines.extend(f"  {name}: {count}" for name, count in ranked)

        return "\n".join(lines)


class AuditLogger:
    """
    Logger for enumeration runs.

    Implements ``emit(level, message)`` so it can be handed to
    ClassRetriever and WritablePropertyFilter. Keeps every message in
    ``messages`` and the matches of the current scan for export.

    Example:
        >>> logger = AuditLogger(verbose=True)
        >>> logger.start_scan("cimv2-string")
        >>> logger.log_records(records)
        >>> summary = logger.end_scan()
        >>> logger.export_json("writable.json")
    """

    def __init__(
        self,
        console_output: bool = True,
        verbose: bool = False,
        console: Console | None = None,
    ):
        """
        Initialize logger.

        Args:
            console_output: Whether to print to console
            verbose: Whether DEBUG messages reach the console
            console: Rich console to print to (stderr by default)
        """
        self.console_output = console_output
        self.verbose = verbose
        self._console = console or Console(stderr=True)

        self.messages: list[LogMessage] = []
        self._records: list["WritablePropertyRecord"] = []
        self._summary: ScanSummary | None = None

    @property
    def records(self) -> list["WritablePropertyRecord"]:
        return list(self._records)

    def emit(self, level: LogLevel, message: str) -> None:
        """Record a message and print it if the level is shown."""
        self.messages.append(
            LogMessage(datetime.now().isoformat(), level, message)
        )

        if self._summary:
            if level == LogLevel.WARNING:
                self._summary.warnings += 1
            elif level == LogLevel.ERROR:
                self._summary.errors += 1

        self._print(level, message)

    def messages_at(self, level: LogLevel) -> list[str]:
        """Get the text of all messages emitted at a level."""
        return [m.message for m in self.messages if m.level == level]

    def start_scan(self, name: str, namespace: str | None = None) -> None:
        """
        Start a new scan session.

        Args:
            name: Scan name/identifier used in the summary
            namespace: Qualified namespace being scanned
        """
        self._records = []
        self._summary = ScanSummary(
            scan_name=name, started_at=datetime.now(), namespace=namespace
        )
        self.emit(LogLevel.INFO, f"Starting scan: {name}")

    def log_classes(self, count: int) -> None:
        """Count class definitions handed to the filter."""
        if self._summary:
            self._summary.classes_inspected += count

    def log_records(self, records: Iterable["WritablePropertyRecord"]) -> None:
        """Add matches to the current scan."""
        for record in records:
            self._records.append(record)
            if self._summary:
                self._summary.total_matches += 1
                self._summary.matches_per_class[record.class_name] = (
                    self._summary.matches_per_class.get(record.class_name, 0) + 1
                )

    def end_scan(self) -> ScanSummary:
        """
        End the scan session.

        Returns:
            Summary report
        """
        if not self._summary:
            raise RuntimeError("No scan in progress")

        self._summary.completed_at = datetime.now()
        self.emit(LogLevel.SUCCESS, "Scan completed")
        return self._summary

    def export(self, filepath: str | Path) -> Path:
        """Export matches, choosing CSV for a .csv suffix and JSON otherwise."""
        path = Path(filepath)
        if path.suffix.lower() == ".csv":
            return self.export_csv(path)
        return self.export_json(path)

    def export_json(self, filepath: str | Path) -> Path:
        """
        Export matches to a JSON file.

        Args:
            filepath: Output path

        Returns:
            Path to exported file
        """
        output_path = Path(filepath)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        data: dict[str, Any] = {
            "scan": self._summary.scan_name if self._summary else None,
            "started_at": self._summary.started_at.isoformat() if self._summary else None,
            "completed_at": self._summary.completed_at.isoformat() if self._summary and self._summary.completed_at else None,
            "matches": [r.to_dict() for r in self._records],
        }

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return output_path

    def export_csv(self, filepath: str | Path) -> Path:
        """
        Export matches to a CSV file.

        Args:
            filepath: Output path

        Returns:
            Path to exported file
        """
        output_path = Path(filepath)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["class", "property", "type"])
            writer.writeheader()
            for record in self._records:
                writer.writerow(record.to_dict())

        return output_path

    def _print(self, level: LogLevel, message: str) -> None:
        if not self.console_output:
            return
        if level == LogLevel.DEBUG and not self.verbose:
            return

        timestamp = datetime.now().strftime("%H:%M:%S")
        colors = {
            LogLevel.DEBUG: "dim",
            LogLevel.INFO: "blue",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red bold",
            LogLevel.SUCCESS: "green bold",
        }
        color = colors.get(level, "white")
        self._console.print(
            f"[dim]{timestamp}[/] [{color}]{level.value}[/] {escape(message)}",
            highlight=False,
        )
