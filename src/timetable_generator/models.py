"""Data models for school entities loaded from the input tables."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TeacherRole(str, Enum):
    """Role of a teacher in the school."""

    REGULAR = "Regular"
    MANAGER = "Manager"

    @classmethod
    def parse(cls, value: str | None) -> "TeacherRole":
        """Parse a role cell; anything other than manager is a regular teacher."""
        if value and str(value).strip().lower() == "manager":
            return cls.MANAGER
        return cls.REGULAR


class RoomCategory(str, Enum):
    """Category of a room, derived from the free-text room_type column."""

    THEORY = "Theory"
    COMPUTER_LAB = "Computer Lab"
    NETWORK_LAB = "Network Lab"
    AI_LAB = "AI Lab"
    IOT_LAB = "IOT Lab"
    FACTORY = "Factory"
    ENGLISH_LAB = "English Lab"
    GRAPHICS_LAB = "Computer Graphic Lab"
    PRACTICE = "Practice"
    HOME = "Home"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str | None) -> "RoomCategory":
        """Parse a room_type cell, ignoring case, spaces, underscores and hyphens.

        "Computer Lab", "computer_lab" and "COMPUTER-LAB" all map to
        COMPUTER_LAB. Unrecognized values map to OTHER.
        """
        if not value:
            return cls.OTHER
        key = _category_key(str(value))
        return _CATEGORY_ALIASES.get(key, cls.OTHER)


def _category_key(value: str) -> str:
    return re.sub(r"[\s_\-]+", "", value).lower()


_CATEGORY_ALIASES: dict[str, RoomCategory] = {
    _category_key(category.value): category for category in RoomCategory
}
_CATEGORY_ALIASES.update(
    {
        _category_key(category.name): category for category in RoomCategory
    }
)
_CATEGORY_ALIASES.update(
    {
        "graphicslab": RoomCategory.GRAPHICS_LAB,
        "graphiclab": RoomCategory.GRAPHICS_LAB,
        "homeroom": RoomCategory.HOME,
        "lecture": RoomCategory.THEORY,
    }
)


@dataclass(frozen=True)
class Subject:
    """A subject with its weekly period load."""

    id: str
    name: str
    theory_periods: int = 0
    practice_periods: int = 0
    credit: int = 0

    @property
    def total_periods(self) -> int:
        """Weekly periods required by one registration of this subject."""
        return self.theory_periods + self.practice_periods


@dataclass(frozen=True)
class Teacher:
    """A teacher. Subjects they can teach live in Qualification rows."""

    id: str
    name: str
    role: TeacherRole = TeacherRole.REGULAR

    @property
    def is_manager(self) -> bool:
        return self.role == TeacherRole.MANAGER


@dataclass(frozen=True)
class Room:
    """A room. HOME rooms are placeholders for homeroom sessions."""

    id: str
    name: str
    category: RoomCategory = RoomCategory.OTHER


@dataclass(frozen=True)
class StudentGroup:
    """A student group (class) taking a set of registered subjects."""

    id: str
    name: str
    student_count: int = 0
    advisor_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class Timeslot:
    """One cell of the weekly grid."""

    id: str
    day: str
    period: int
    start: str = ""
    end: str = ""


@dataclass(frozen=True)
class Qualification:
    """A teacher may teach a subject."""

    teacher_id: str
    subject_id: str


@dataclass(frozen=True)
class Registration:
    """A group must take a subject."""

    group_id: str
    subject_id: str


@dataclass
class SchoolData:
    """All entity tables for one generation run."""

    subjects: list[Subject] = field(default_factory=list)
    teachers: list[Teacher] = field(default_factory=list)
    rooms: list[Room] = field(default_factory=list)
    groups: list[StudentGroup] = field(default_factory=list)
    timeslots: list[Timeslot] = field(default_factory=list)
    qualifications: list[Qualification] = field(default_factory=list)
    registrations: list[Registration] = field(default_factory=list)

    @property
    def subjects_by_id(self) -> dict[str, Subject]:
        return {subject.id: subject for subject in self.subjects}

    @property
    def teachers_by_id(self) -> dict[str, Teacher]:
        return {teacher.id: teacher for teacher in self.teachers}

    @property
    def rooms_by_id(self) -> dict[str, Room]:
        return {room.id: room for room in self.rooms}

    @property
    def groups_by_id(self) -> dict[str, StudentGroup]:
        return {group.id: group for group in self.groups}

    def qualified_teachers(self) -> dict[str, list[str]]:
        """Map subject id to qualified teacher ids, in qualification order."""
        skills: dict[str, list[str]] = {}
        for qualification in self.qualifications:
            teachers = skills.setdefault(qualification.subject_id, [])
            if qualification.teacher_id not in teachers:
                teachers.append(qualification.teacher_id)
        return skills

    def timeslot_ids(self) -> dict[tuple[str, int], str]:
        """Map (day, period) to timeslot id; the first row for a cell wins."""
        lookup: dict[tuple[str, int], str] = {}
        for timeslot in self.timeslots:
            lookup.setdefault((timeslot.day, timeslot.period), timeslot.id)
        return lookup

    def period_times(self) -> dict[int, str]:
        """Map period number to its "start-end" label, first row wins."""
        times: dict[int, str] = {}
        for timeslot in self.timeslots:
            if timeslot.period not in times and (timeslot.start or timeslot.end):
                times[timeslot.period] = f"{timeslot.start}-{timeslot.end}"
        return times

    @property
    def is_empty(self) -> bool:
        return not self.registrations and not self.groups

    def summary(self) -> dict[str, Any]:
        """Row counts per table."""
        return {
            "subjects": len(self.subjects),
            "teachers": len(self.teachers),
            "rooms": len(self.rooms),
            "groups": len(self.groups),
            "timeslots": len(self.timeslots),
            "qualifications": len(self.qualifications),
            "registrations": len(self.registrations),
        }
