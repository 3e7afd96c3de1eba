"""Assignment writer: exports generated timetables."""

import csv
import json
from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd

from .constants import OUTPUT_COLUMNS
from .loader import read_table
from .scheduler.models import ScheduleAssignment, ScheduleResult
from .utils import safe_int, safe_str


class BaseExporter(ABC):
    """Base class for exporters."""

    @abstractmethod
    def export(self, result: ScheduleResult, output_path: str | Path) -> None:
        """Export schedule result to file.

        Args:
            result: ScheduleResult to export
            output_path: Path to output file
        """
        pass


class CSVExporter(BaseExporter):
    """Export to the output table format, one row per (group, period).

    The file is overwritten on every export. The header is written even when
    there are no assignments.
    """

    def export(self, result: ScheduleResult, output_path: str | Path) -> None:
        write_assignments_csv(result.assignments, output_path)


class JSONExporter(BaseExporter):
    """Export the full result, including unplaced diagnostics, to JSON."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        """Initialize exporter.

        Args:
            indent: JSON indentation level
            ensure_ascii: If False, allows non-ASCII characters
        """
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def export(self, result: ScheduleResult, output_path: str | Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(
                result.to_dict(),
                f,
                indent=self.indent,
                ensure_ascii=self.ensure_ascii,
            )


class ExcelExporter(BaseExporter):
    """Export to a flat Excel workbook.

    Creates sheets:
    - Assignments: the output table
    - Unplaced: occurrences that found no placement
    - Summary: run statistics
    """

    def export(self, result: ScheduleResult, output_path: str | Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            self._export_assignments_sheet(result, writer)
            self._export_unplaced_sheet(result, writer)
            self._export_summary_sheet(result, writer)

    def _export_assignments_sheet(
        self, result: ScheduleResult, writer: pd.ExcelWriter
    ) -> None:
        rows = [a.to_dict() for a in result.assignments]
        df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=OUTPUT_COLUMNS)
        df.to_excel(writer, sheet_name="Assignments", index=False)

    def _export_unplaced_sheet(
        self, result: ScheduleResult, writer: pd.ExcelWriter
    ) -> None:
        rows = [
            {
                "Subject": item.subject_id,
                "Groups": "; ".join(item.groups),
                "Kind": item.session_kind.value,
                "Missing Occurrences": item.missing_occurrences,
                "Missing Periods": item.missing_periods,
                "Reason": item.reason.value,
            }
            for item in result.unplaced
        ]
        df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=["Subject"])
        df.to_excel(writer, sheet_name="Unplaced", index=False)

    def _export_summary_sheet(
        self, result: ScheduleResult, writer: pd.ExcelWriter
    ) -> None:
        stats = result.statistics
        rows = [
            {"Metric": "Generation Date", "Value": result.generation_date},
            {"Metric": "Solver", "Value": stats.solver},
            {"Metric": "Seed", "Value": "" if result.seed is None else result.seed},
            {"Metric": "Tasks", "Value": stats.total_tasks},
            {"Metric": "Merged Tasks", "Value": stats.merged_tasks},
            {"Metric": "Occurrences Placed", "Value": stats.occurrences_placed},
            {"Metric": "Occurrences Unplaced", "Value": stats.occurrences_unplaced},
            {"Metric": "Rows", "Value": result.total_assigned},
        ]
        pd.DataFrame(rows).to_excel(writer, sheet_name="Summary", index=False)


def write_assignments_csv(
    assignments: list[ScheduleAssignment], output_path: str | Path
) -> None:
    """Write the output table, replacing any previous file.

    Args:
        assignments: Rows to write
        output_path: Destination CSV path
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=OUTPUT_COLUMNS)
        writer.writeheader()
        writer.writerows(a.to_dict() for a in assignments)


def load_assignments(path: str | Path) -> list[ScheduleAssignment]:
    """Read a previously written output table.

    A missing file yields no assignments.
    """
    df = read_table(path)
    if df.empty or "group_id" not in df.columns:
        return []

    return [
        ScheduleAssignment(
            group_id=safe_str(row.get("group_id")),
            timeslot_id=safe_str(row.get("timeslot_id")),
            day=safe_str(row.get("day")),
            period=safe_int(row.get("period")),
            subject_id=safe_str(row.get("subject_id")),
            teacher_id=safe_str(row.get("teacher_id")),
            room_id=safe_str(row.get("room_id")),
        )
        for row in df.to_dict("records")
        if safe_str(row.get("group_id"))
    ]


def get_exporter(format_type: str) -> BaseExporter:
    """Get appropriate exporter for format type.

    Args:
        format_type: Export format ('csv', 'json', 'excel')

    Returns:
        Exporter instance

    Raises:
        ValueError: If format type is not supported
    """
    exporters = {
        "csv": CSVExporter,
        "json": JSONExporter,
        "excel": ExcelExporter,
    }

    if format_type not in exporters:
        raise ValueError(
            f"Unsupported format: {format_type}. Supported: {', '.join(exporters.keys())}"
        )

    return exporters[format_type]()
