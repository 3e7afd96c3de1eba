"""Test fixtures for timetable generator tests."""

import pandas as pd
import pytest

from timetable_generator.constants import (
    DAYS,
    GROUP_FILE,
    QUALIFICATION_FILE,
    REGISTRATION_FILE,
    ROOM_FILE,
    SUBJECT_FILE,
    TEACHER_FILE,
    TIMESLOT_FILE,
)
from timetable_generator.models import (
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
from timetable_generator.scheduler.config import EngineConfig


def build_timeslots() -> list[Timeslot]:
    """Full Mon-Fri x 10 grid with ids like "Mon-1"."""
    return [
        Timeslot(
            id=f"{day}-{period}",
            day=day,
            period=period,
            start=f"{7 + period:02d}:00",
            end=f"{7 + period:02d}:50",
        )
        for day in DAYS
        for period in range(1, 11)
    ]


@pytest.fixture
def school_data() -> SchoolData:
    """Two groups sharing a general-education subject and an activity.

    G1: MATH101 (2 theory), PROG201 (1 theory + 2 practice), 20000-1101, 20000-2002
    G2: MATH101, 20000-1101, 20000-2002, IOT301 (2 practice)
    """
    return SchoolData(
        subjects=[
            Subject("MATH101", "Mathematics", 2, 0, 3),
            Subject("PROG201", "Programming", 1, 2, 3),
            Subject("20000-1101", "Thai Language", 1, 0, 1),
            Subject("20000-2002", "Scouts", 1, 0, 0),
            Subject("IOT301", "IOT Devices", 0, 2, 2),
        ],
        teachers=[
            Teacher("T1", "นายสมชาย ใจดี"),
            Teacher("T2", "Mrs. Jane Doe"),
            Teacher("M1", "Dr. Boss Person", TeacherRole.MANAGER),
        ],
        rooms=[
            Room("R101", "Lecture 101", RoomCategory.THEORY),
            Room("R102", "Lecture 102", RoomCategory.THEORY),
            Room("LAB1", "Computer Lab 1", RoomCategory.COMPUTER_LAB),
            Room("R6201", "IoT Lab", RoomCategory.IOT_LAB),
            Room("R_HOME", "Homeroom", RoomCategory.HOME),
        ],
        groups=[
            StudentGroup("G1", "IT-1", 30, ("ครูสมชาย",)),
            StudentGroup("G2", "IT-2", 28, ("Unknown Person", "Jane")),
        ],
        timeslots=build_timeslots(),
        qualifications=[
            Qualification("T1", "MATH101"),
            Qualification("T2", "PROG201"),
            Qualification("T1", "20000-1101"),
            Qualification("T2", "20000-2002"),
            Qualification("T2", "IOT301"),
        ],
        registrations=[
            Registration("G1", "MATH101"),
            Registration("G1", "PROG201"),
            Registration("G1", "20000-1101"),
            Registration("G1", "20000-2002"),
            Registration("G2", "MATH101"),
            Registration("G2", "20000-1101"),
            Registration("G2", "20000-2002"),
            Registration("G2", "IOT301"),
        ],
    )


@pytest.fixture
def fixed_config() -> EngineConfig:
    """Default rules with a fixed Mon-Fri day order."""
    return EngineConfig(shuffle_days=False)


def write_school_csvs(data: SchoolData, directory) -> None:
    """Write SchoolData as the seven input tables."""
    tables = {
        SUBJECT_FILE: [
            {
                "subject_id": s.id,
                "subject_name": s.name,
                "theory": s.theory_periods,
                "practice": s.practice_periods,
                "credit": s.credit,
            }
            for s in data.subjects
        ],
        TEACHER_FILE: [
            {"teacher_id": t.id, "teacher_name": t.name, "role": t.role.value}
            for t in data.teachers
        ],
        ROOM_FILE: [
            {"room_id": r.id, "room_name": r.name, "room_type": r.category.value}
            for r in data.rooms
        ],
        GROUP_FILE: [
            {
                "group_id": g.id,
                "group_name": g.name,
                "student_count": g.student_count,
                "advisor": "/".join(g.advisor_names),
            }
            for g in data.groups
        ],
        TIMESLOT_FILE: [
            {
                "timeslot_id": t.id,
                "day": t.day,
                "period": t.period,
                "start": t.start,
                "end": t.end,
            }
            for t in data.timeslots
        ],
        QUALIFICATION_FILE: [
            {"teacher_id": q.teacher_id, "subject_id": q.subject_id}
            for q in data.qualifications
        ],
        REGISTRATION_FILE: [
            {"group_id": r.group_id, "subject_id": r.subject_id}
            for r in data.registrations
        ],
    }
    for name, rows in tables.items():
        pd.DataFrame(rows).to_csv(directory / name, index=False, encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path, school_data):
    """Data directory holding the school_data fixture as CSV tables."""
    directory = tmp_path / "data"
    directory.mkdir()
    write_school_csvs(school_data, directory)
    return directory
