"""Tests for task derivation."""

from timetable_generator.models import (
    Registration,
    SchoolData,
    StudentGroup,
    Subject,
    Teacher,
)
from timetable_generator.scheduler.config import EngineConfig
from timetable_generator.scheduler.models import SessionKind
from timetable_generator.scheduler.tasks import (
    build_teacher_name_index,
    derive_tasks,
    homeroom_task,
    resolve_advisor,
    subject_tasks,
)


class TestSubjectTasks:
    """Tests for subject_tasks function."""

    def test_theory_one_period_per_occurrence(self):
        tasks = subject_tasks("G1", Subject("MATH101", "Mathematics", 2, 0), EngineConfig())
        assert len(tasks) == 1
        task = tasks[0]
        assert task.session_kind == SessionKind.THEORY
        assert task.duration == 1
        assert task.occurrences == 2
        assert task.groups == ["G1"]

    def test_practice_one_contiguous_block(self):
        tasks = subject_tasks("G1", Subject("PROG201", "Programming", 1, 3), EngineConfig())
        assert [t.session_kind for t in tasks] == [SessionKind.THEORY, SessionKind.PRACTICE]
        practice = tasks[1]
        assert practice.duration == 3
        assert practice.occurrences == 1

    def test_no_periods_no_tasks(self):
        assert subject_tasks("G1", Subject("X", "Nothing", 0, 0), EngineConfig()) == []

    def test_activity_is_one_double_block(self):
        tasks = subject_tasks("G1", Subject("20000-2002", "Scouts", 3, 0), EngineConfig())
        task = tasks[0]
        assert task.is_activity
        assert task.fixed_day
        assert not task.is_common
        assert task.duration == 2
        assert task.occurrences == 1

    def test_activity_practice_uses_activity_duration(self):
        tasks = subject_tasks("G1", Subject("20000-2002", "Scouts", 0, 4), EngineConfig())
        assert tasks[0].duration == 2

    def test_common_and_iot_flags(self):
        config = EngineConfig()
        common = subject_tasks("G1", Subject("20000-1101", "Thai", 1, 0), config)[0]
        iot = subject_tasks("G1", Subject("31901-1001", "IOT Basics", 0, 2), config)[0]
        assert common.is_common and not common.is_iot
        assert iot.is_iot and not iot.is_common


class TestAdvisorResolution:
    """Tests for teacher name index and advisor lookup."""

    def test_index_strips_titles(self):
        index = build_teacher_name_index(
            [Teacher("T1", "นายสมชาย ใจดี"), Teacher("T2", "Mrs. Jane Doe")]
        )
        assert index == {"สมชาย": "T1", "Jane": "T2"}

    def test_first_declared_teacher_wins(self):
        index = build_teacher_name_index(
            [Teacher("T1", "Jane Doe"), Teacher("T2", "Dr. Jane Smith")]
        )
        assert index["Jane"] == "T1"

    def test_resolve_first_matching_advisor(self):
        index = {"สมชาย": "T1", "Jane": "T2"}
        group = StudentGroup("G1", "IT-1", advisor_names=("Nobody", "Ms. Jane", "ครูสมชาย"))
        assert resolve_advisor(group, index) == "T2"

    def test_resolve_none(self):
        index = {"Jane": "T2"}
        assert resolve_advisor(StudentGroup("G1", "IT-1", advisor_names=("Bob",)), index) is None
        assert resolve_advisor(StudentGroup("G1", "IT-1"), index) is None
        assert resolve_advisor(None, index) is None


class TestHomeroomTask:
    """Tests for homeroom_task function."""

    def test_homeroom(self):
        task = homeroom_task("G1", "T1")
        assert task.is_homeroom
        assert task.session_kind == SessionKind.HOMEROOM
        assert task.subject_id == "HOMEROOM"
        assert task.advisor_teacher_id == "T1"
        assert task.required_periods == 1


class TestDeriveTasks:
    """Tests for derive_tasks function."""

    def test_fixture_task_order(self, school_data, fixed_config):
        tasks = derive_tasks(school_data, fixed_config)
        assert [(t.groups[0], t.subject_id, t.session_kind.value) for t in tasks] == [
            ("G1", "MATH101", "theory"),
            ("G1", "PROG201", "theory"),
            ("G1", "PROG201", "practice"),
            ("G1", "20000-1101", "theory"),
            ("G1", "20000-2002", "theory"),
            ("G1", "HOMEROOM", "homeroom"),
            ("G2", "MATH101", "theory"),
            ("G2", "20000-1101", "theory"),
            ("G2", "20000-2002", "theory"),
            ("G2", "IOT301", "practice"),
            ("G2", "HOMEROOM", "homeroom"),
        ]

    def test_homeroom_advisors_resolved(self, school_data, fixed_config):
        homerooms = [t for t in derive_tasks(school_data, fixed_config) if t.is_homeroom]
        assert [t.advisor_teacher_id for t in homerooms] == ["T1", "T2"]

    def test_unknown_subject_skipped(self):
        data = SchoolData(
            subjects=[Subject("MATH101", "Mathematics", 1, 0)],
            registrations=[Registration("G1", "GHOST"), Registration("G1", "MATH101")],
        )
        tasks = derive_tasks(data, EngineConfig())
        assert [t.subject_id for t in tasks] == ["MATH101", "HOMEROOM"]

    def test_unregistered_group_gets_homeroom(self):
        data = SchoolData(
            groups=[StudentGroup("G1", "IT-1"), StudentGroup("G9", "IT-9")],
            subjects=[Subject("MATH101", "Mathematics", 1, 0)],
            registrations=[Registration("G1", "MATH101")],
        )
        tasks = derive_tasks(data, EngineConfig())
        assert [(t.groups, t.subject_id) for t in tasks] == [
            (["G1"], "MATH101"),
            (["G1"], "HOMEROOM"),
            (["G9"], "HOMEROOM"),
        ]

    def test_group_missing_from_table_has_no_advisor(self):
        data = SchoolData(
            teachers=[Teacher("T1", "Jane")],
            subjects=[Subject("MATH101", "Mathematics", 1, 0)],
            registrations=[Registration("G7", "MATH101")],
        )
        homeroom = derive_tasks(data, EngineConfig())[-1]
        assert homeroom.is_homeroom
        assert homeroom.advisor_teacher_id is None

    def test_empty_data(self):
        assert derive_tasks(SchoolData(), EngineConfig()) == []

    def test_one_group_per_task(self, school_data, fixed_config):
        assert all(len(t.groups) == 1 for t in derive_tasks(school_data, fixed_config))

    def test_summary_logs_required_periods(self, school_data, fixed_config, caplog):
        with caplog.at_level("INFO", logger="timetable_generator.scheduler.tasks"):
            tasks = derive_tasks(school_data, fixed_config)
        assert sum(t.required_periods for t in tasks) == 17
        assert "Derived 11 tasks (17 periods) for 2 groups" in caplog.text
