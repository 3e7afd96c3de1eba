"""Tests for the CP-SAT placement engine."""

from collections import defaultdict

import pytest

from timetable_generator.constants import DAYS
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
)
from timetable_generator.report import build_report
from timetable_generator.scheduler.calendar import ResourceCalendar
from timetable_generator.scheduler.config import EngineConfig
from timetable_generator.scheduler.engine import PlacementRules
from timetable_generator.scheduler.merger import merge_common_tasks
from timetable_generator.scheduler.models import ResourceKind, UnplacedReason
from timetable_generator.scheduler.pipeline import generate_schedule
from timetable_generator.scheduler.solver import CpSatModelBuilder, CpSatPlacementEngine
from timetable_generator.scheduler.tasks import derive_tasks


def cp_sat_config(**kwargs) -> EngineConfig:
    return EngineConfig(solver="cp-sat", time_limit=10, seed=1, **kwargs)


def rows_for(result, subject_id):
    return [a for a in result.assignments if a.subject_id == subject_id]


class TestCpSatModelBuilder:
    """Tests for candidate enumeration."""

    def test_candidates_respect_static_rules(self, school_data):
        config = cp_sat_config()
        tasks = merge_common_tasks(derive_tasks(school_data, config))
        builder = CpSatModelBuilder(PlacementRules(school_data, config), tasks, ResourceCalendar())
        builder.build()

        assert len(builder.candidates) == len(builder.x)
        for candidate in builder.candidates:
            placement = candidate.placement
            assert config.lunch_period not in placement.periods
            task = tasks[candidate.task_index]
            if task.is_activity:
                assert (placement.day, placement.start_period) == ("Wed", 8)

    def test_homeroom_has_one_candidate_per_cell(self, school_data):
        config = cp_sat_config()
        tasks = [t for t in derive_tasks(school_data, config) if t.is_homeroom][:1]
        builder = CpSatModelBuilder(PlacementRules(school_data, config), tasks, ResourceCalendar())
        builder.build()
        # 8 valid theory-bounded starts on 5 days
        assert len(builder.candidates) == 40

    def test_prebooked_cells_excluded(self, school_data):
        config = cp_sat_config()
        calendar = ResourceCalendar()
        for day in DAYS:
            for period in range(1, 11):
                calendar.book(ResourceKind.GROUP, "G1", day, period)
        tasks = [t for t in derive_tasks(school_data, config) if t.groups == ["G1"]]
        builder = CpSatModelBuilder(PlacementRules(school_data, config), tasks, calendar)
        builder.build()
        assert builder.candidates == []


class TestCpSatPlacementEngine:
    """Tests for CpSatPlacementEngine on the shared fixture."""

    @pytest.fixture
    def result(self, school_data):
        return generate_schedule(school_data, cp_sat_config())

    def test_everything_placed(self, school_data, result):
        assert result.unplaced == []
        assert build_report(school_data, result.assignments).is_complete
        assert result.statistics.solver == "cp-sat"

    def test_no_group_double_booked(self, result):
        keys = [(a.group_id, a.day, a.period) for a in result.assignments]
        assert len(keys) == len(set(keys))

    def test_no_teacher_or_room_double_booked(self, result):
        teachers = defaultdict(set)
        rooms = defaultdict(set)
        for a in result.assignments:
            if a.teacher_id:
                teachers[(a.teacher_id, a.day, a.period)].add(a.subject_id)
            if a.room_id != "R_HOME":
                rooms[(a.room_id, a.day, a.period)].add(a.subject_id)
        assert all(len(s) == 1 for s in teachers.values())
        assert all(len(s) == 1 for s in rooms.values())

    def test_lunch_and_theory_bounds(self, result):
        for a in result.assignments:
            assert a.period != 5
            if a.period == 10:
                assert a.subject_id in {"PROG201", "IOT301"}

    def test_activity_pinned(self, result):
        rows = rows_for(result, "20000-2002")
        assert len(rows) == 4
        assert {(a.day, a.period) for a in rows} == {("Wed", 8), ("Wed", 9)}

    def test_merged_subject_shares_slot(self, result):
        rows = rows_for(result, "20000-1101")
        g1 = {(a.day, a.period, a.teacher_id, a.room_id) for a in rows if a.group_id == "G1"}
        g2 = {(a.day, a.period, a.teacher_id, a.room_id) for a in rows if a.group_id == "G2"}
        assert g1 == g2

    def test_reproducible(self, school_data, result):
        again = generate_schedule(school_data, cp_sat_config())
        assert sorted(again.assignments, key=repr) == sorted(result.assignments, key=repr)


class TestCpSatScenarios:
    """Constrained scenarios solved with CP-SAT."""

    def test_manager_meeting_excluded(self):
        data = SchoolData(
            subjects=[Subject("ADMIN", "Administration", 40, 0, 0)],
            teachers=[Teacher("M1", "Boss", TeacherRole.MANAGER)],
            rooms=[Room("R101", "Lecture", RoomCategory.THEORY)],
            groups=[StudentGroup("G1", "IT-1")],
            qualifications=[Qualification("M1", "ADMIN")],
            registrations=[Registration("G1", "ADMIN")],
        )
        result = generate_schedule(data, cp_sat_config())
        admin = rows_for(result, "ADMIN")
        assert len(admin) == 39
        assert ("Tue", 8) not in {(a.day, a.period) for a in admin}
        assert build_report(data, result.assignments).missing_periods == 1

    def test_exhausted_iot_room_is_shortfall(self):
        data = SchoolData(
            subjects=[Subject("IOT301", "IOT Devices", 0, 1, 1)],
            teachers=[Teacher("T1", "Jane")],
            rooms=[
                Room("LAB1", "Computer Lab", RoomCategory.COMPUTER_LAB),
                Room("R6201", "IoT Lab", RoomCategory.IOT_LAB),
            ],
            groups=[StudentGroup("G1", "IT-1")],
            qualifications=[Qualification("T1", "IOT301")],
            registrations=[Registration("G1", "IOT301")],
        )
        calendar = ResourceCalendar()
        for day in DAYS:
            for period in range(1, 11):
                calendar.book(ResourceKind.ROOM, "R6201", day, period)

        config = cp_sat_config()
        engine = CpSatPlacementEngine(data, config, calendar=calendar)
        result = engine.schedule(derive_tasks(data, config))
        assert rows_for(result, "IOT301") == []
        assert [(u.subject_id, u.reason) for u in result.unplaced] == [
            ("IOT301", UnplacedReason.NO_SLOT_AVAILABLE)
        ]

    def test_chosen_placements_are_booked(self, school_data):
        config = cp_sat_config()
        engine = CpSatPlacementEngine(school_data, config)
        result = engine.schedule(merge_common_tasks(derive_tasks(school_data, config)))
        for a in result.assignments:
            assert engine.calendar.is_busy(ResourceKind.GROUP, a.group_id, a.day, a.period)
        booked_rooms = {room for room, _, _ in engine.calendar.booked_cells(ResourceKind.ROOM)}
        assert "R_HOME" not in booked_rooms

    def test_empty_input(self):
        result = generate_schedule(SchoolData(), cp_sat_config())
        assert result.assignments == []
        assert result.unplaced == []
