"""Timetable Generator - weekly school timetables from CSV data tables.

This module reads subjects, teachers, rooms, student groups, timeslots,
teaching qualifications and registrations from a data directory, places
every required session on a Mon-Fri, 10-period grid without double booking
any group, teacher or room, and writes the result to output.csv.

Example usage:
    from timetable_generator import GenerationRunner, EngineConfig

    runner = GenerationRunner("data", EngineConfig(seed=7))
    outcome = runner.generate()

    print(f"Rows written: {outcome.result.total_assigned}")
    print(f"Missing periods: {outcome.report.missing_periods}")

    for item in outcome.report.shortfalls:
        print(f"{item.group_id} | {item.subject_id} | {item.count}")

    # Export to JSON
    from timetable_generator.exporters import JSONExporter
    exporter = JSONExporter()
    exporter.export(outcome.result, "result.json")
"""

from .exceptions import (
    ConfigError,
    GenerationInProgressError,
    InputTableError,
    TimetableError,
    UnknownSolverError,
)
from .exporters import CSVExporter, ExcelExporter, JSONExporter, get_exporter
from .loader import SchoolDataLoader, load_school_data
from .models import (
    Qualification,
    Registration,
    Room,
    RoomCategory,
    SchoolData,
    StudentGroup,
    Subject,
    Teacher,
    TeacherRole,
    Timeslot,
)
from .report import DiagnosticsReport, Shortfall, build_report
from .runner import GenerationOutcome, GenerationRunner
from .scheduler import EngineConfig, ScheduleResult, generate_schedule, load_engine_config

__version__ = "0.1.0"

__all__ = [
    # Runner
    "GenerationRunner",
    "GenerationOutcome",
    "generate_schedule",
    # Data
    "SchoolDataLoader",
    "load_school_data",
    "SchoolData",
    "Subject",
    "Teacher",
    "TeacherRole",
    "Room",
    "RoomCategory",
    "StudentGroup",
    "Timeslot",
    "Qualification",
    "Registration",
    # Configuration
    "EngineConfig",
    "load_engine_config",
    # Results
    "ScheduleResult",
    "DiagnosticsReport",
    "Shortfall",
    "build_report",
    # Exporters
    "JSONExporter",
    "CSVExporter",
    "ExcelExporter",
    "get_exporter",
    # Exceptions
    "TimetableError",
    "InputTableError",
    "ConfigError",
    "UnknownSolverError",
    "GenerationInProgressError",
]
