"""Diagnostics: expected versus placed periods and shortfall listing."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from .models import SchoolData
from .scheduler.models import ScheduleAssignment


@dataclass
class Shortfall:
    """A registration that received fewer periods than its subject requires."""

    group_id: str
    subject_id: str
    subject_name: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "count": self.count,
        }


@dataclass
class DiagnosticsReport:
    """Period accounting for a generated timetable.

    Attributes:
        expected_periods: Sum of theory + practice over all registrations
        placed_periods: Rows matching a registration, capped per registration
        total_rows: All output rows, including homeroom sessions
        shortfalls: Registrations short of their required periods
    """

    expected_periods: int = 0
    placed_periods: int = 0
    total_rows: int = 0
    shortfalls: list[Shortfall] = field(default_factory=list)

    @property
    def missing_periods(self) -> int:
        return sum(item.count for item in self.shortfalls)

    @property
    def is_complete(self) -> bool:
        return not self.shortfalls

    def to_dict(self) -> dict[str, Any]:
        return {
            "expected": self.expected_periods,
            "actual": self.placed_periods,
            "total_rows": self.total_rows,
            "missing": self.missing_periods,
            "missing_details": [s.to_dict() for s in self.shortfalls],
        }


def build_report(
    data: SchoolData, assignments: list[ScheduleAssignment]
) -> DiagnosticsReport:
    """Compare registered load with the generated assignments.

    Registrations of unknown subjects are ignored. A registration repeated
    in the table counts once per row. Rows beyond what a registration
    requires do not offset shortfalls elsewhere, so
    expected_periods - placed_periods == sum of shortfall counts.

    Args:
        data: School data the timetable was generated from
        assignments: Output rows

    Returns:
        DiagnosticsReport
    """
    subjects = data.subjects_by_id

    expected: dict[tuple[str, str], int] = {}
    for registration in data.registrations:
        subject = subjects.get(registration.subject_id)
        if subject is None:
            continue
        key = (registration.group_id, registration.subject_id)
        expected[key] = expected.get(key, 0) + subject.total_periods

    actual = Counter((a.group_id, a.subject_id) for a in assignments)

    report = DiagnosticsReport(total_rows=len(assignments))
    for (group_id, subject_id), required in expected.items():
        placed = min(actual.get((group_id, subject_id), 0), required)
        report.expected_periods += required
        report.placed_periods += placed
        if placed < required:
            report.shortfalls.append(
                Shortfall(
                    group_id=group_id,
                    subject_id=subject_id,
                    subject_name=subjects[subject_id].name,
                    count=required - placed,
                )
            )
    return report
