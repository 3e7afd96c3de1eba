"""Data models for task derivation, placement and schedule results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class SessionKind(str, Enum):
    """Kind of a schedulable session."""

    THEORY = "theory"
    PRACTICE = "practice"
    HOMEROOM = "homeroom"


class ResourceKind(str, Enum):
    """Resource kinds tracked by the calendar."""

    GROUP = "group"
    TEACHER = "teacher"
    ROOM = "room"


class UnplacedReason(str, Enum):
    """Why an occurrence could not be placed."""

    GROUP_BUSY = "group_busy"
    TEACHER_BUSY = "teacher_busy"
    NO_ROOM_AVAILABLE = "no_room_available"
    NO_SLOT_AVAILABLE = "no_slot_available"
    SOLVER_TIMEOUT = "solver_timeout"


@dataclass
class ScheduleTask:
    """A derived unit of curriculum demand for one subject.

    Starts with one group; merging may append more groups that then share
    every placement of the task.
    """

    subject_id: str
    groups: list[str]
    session_kind: SessionKind
    duration: int = 1
    occurrences: int = 1
    is_activity: bool = False
    is_common: bool = False
    is_iot: bool = False
    is_homeroom: bool = False
    fixed_day: bool = False
    advisor_teacher_id: str | None = None

    @property
    def label(self) -> str:
        """Short human-readable identifier for logs."""
        return f"{self.subject_id}/{self.session_kind.value} [{', '.join(self.groups)}]"

    @property
    def required_periods(self) -> int:
        return self.duration * self.occurrences

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "groups": self.groups,
            "session_kind": self.session_kind.value,
            "duration": self.duration,
            "occurrences": self.occurrences,
            "is_activity": self.is_activity,
            "is_common": self.is_common,
            "is_iot": self.is_iot,
            "is_homeroom": self.is_homeroom,
            "fixed_day": self.fixed_day,
            "advisor_teacher_id": self.advisor_teacher_id,
        }


@dataclass(frozen=True)
class Placement:
    """One accepted (day, period-span, teacher, room) choice for an occurrence."""

    day: str
    start_period: int
    duration: int
    teacher_id: str | None
    room_id: str

    @property
    def periods(self) -> range:
        return range(self.start_period, self.start_period + self.duration)


@dataclass(frozen=True)
class ScheduleAssignment:
    """One output row: a group occupies one period."""

    group_id: str
    timeslot_id: str
    day: str
    period: int
    subject_id: str
    teacher_id: str
    room_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "timeslot_id": self.timeslot_id,
            "day": self.day,
            "period": self.period,
            "subject_id": self.subject_id,
            "teacher_id": self.teacher_id,
            "room_id": self.room_id,
        }


@dataclass
class UnplacedTask:
    """Occurrences of a task that found no feasible placement."""

    subject_id: str
    groups: list[str]
    session_kind: SessionKind
    missing_occurrences: int
    missing_periods: int
    reason: UnplacedReason = UnplacedReason.NO_SLOT_AVAILABLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "groups": self.groups,
            "session_kind": self.session_kind.value,
            "missing_occurrences": self.missing_occurrences,
            "missing_periods": self.missing_periods,
            "reason": self.reason.value,
        }


@dataclass
class ScheduleStatistics:
    """Statistics about one generation run."""

    total_tasks: int = 0
    merged_tasks: int = 0
    occurrences_placed: int = 0
    occurrences_unplaced: int = 0
    by_day: dict[str, int] = field(default_factory=dict)
    by_room: dict[str, int] = field(default_factory=dict)
    solver: str = ""
    solver_time_seconds: float = 0.0

    @property
    def placement_rate(self) -> float:
        total = self.occurrences_placed + self.occurrences_unplaced
        return self.occurrences_placed / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_tasks": self.total_tasks,
            "merged_tasks": self.merged_tasks,
            "occurrences_placed": self.occurrences_placed,
            "occurrences_unplaced": self.occurrences_unplaced,
            "placement_rate": self.placement_rate,
            "by_day": self.by_day,
            "by_room": self.by_room,
            "solver": self.solver,
            "solver_time_seconds": self.solver_time_seconds,
        }


@dataclass
class ScheduleResult:
    """Result of one generation run."""

    assignments: list[ScheduleAssignment] = field(default_factory=list)
    unplaced: list[UnplacedTask] = field(default_factory=list)
    statistics: ScheduleStatistics = field(default_factory=ScheduleStatistics)
    generation_date: str = field(default_factory=lambda: datetime.now().isoformat())
    seed: int | None = None

    @property
    def total_assigned(self) -> int:
        """Number of output rows."""
        return len(self.assignments)

    @property
    def total_unplaced_periods(self) -> int:
        return sum(item.missing_periods for item in self.unplaced)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "generation_date": self.generation_date,
            "seed": self.seed,
            "assignments": [a.to_dict() for a in self.assignments],
            "unplaced": [u.to_dict() for u in self.unplaced],
            "statistics": self.statistics.to_dict(),
        }
