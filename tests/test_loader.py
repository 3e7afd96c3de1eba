"""Tests for the CSV entity loader."""

import pandas as pd
import pytest

from timetable_generator.constants import (
    GROUP_FILE,
    INPUT_FILES,
    REGISTRATION_FILE,
    ROOM_FILE,
    SUBJECT_FILE,
    TEACHER_FILE,
)
from timetable_generator.exceptions import InputTableError
from timetable_generator.loader import SchoolDataLoader, load_school_data, read_table
from timetable_generator.models import RoomCategory, TeacherRole


class TestReadTable:
    """Tests for read_table function."""

    def test_missing_file_is_empty(self, tmp_path):
        df = read_table(tmp_path / "nope.csv")
        assert isinstance(df, pd.DataFrame)
        assert df.empty

    def test_empty_file_is_empty(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        assert read_table(path).empty

    def test_headers_are_normalized(self, tmp_path):
        path = tmp_path / "t.csv"
        path.write_text("\ufeffSubject ID, Subject Name\nMATH101, Mathematics\n", encoding="utf-8")
        df = read_table(path)
        assert list(df.columns) == ["subject_id", "subject_name"]
        assert df.iloc[0]["subject_name"] == "Mathematics"

    def test_cells_read_as_strings(self, tmp_path):
        path = tmp_path / "t.csv"
        path.write_text("group_id,student_count\n007,30\n", encoding="utf-8")
        df = read_table(path)
        assert df.iloc[0]["group_id"] == "007"

    def test_blank_cells_are_empty_strings(self, tmp_path):
        path = tmp_path / "t.csv"
        path.write_text("group_id,advisor\nG1,\n", encoding="utf-8")
        df = read_table(path)
        assert df.iloc[0]["advisor"] == ""

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("a,b\n1,2\n3,4,5,6\n", encoding="utf-8")
        with pytest.raises(InputTableError) as exc_info:
            read_table(path)
        assert exc_info.value.path == str(path)


class TestSchoolDataLoader:
    """Tests for SchoolDataLoader class."""

    def test_loads_all_tables(self, data_dir, school_data):
        data = SchoolDataLoader(data_dir).load()
        assert data.summary() == school_data.summary()

    def test_entities_round_trip(self, data_dir, school_data):
        data = load_school_data(data_dir)
        assert data.subjects == school_data.subjects
        assert data.teachers == school_data.teachers
        assert data.rooms == school_data.rooms
        assert data.groups == school_data.groups
        assert data.qualifications == school_data.qualifications
        assert data.registrations == school_data.registrations

    def test_timeslot_ids_preserved(self, data_dir):
        data = load_school_data(data_dir)
        assert data.timeslot_ids()[("Wed", 8)] == "Wed-8"

    def test_missing_directory_loads_empty(self, tmp_path):
        data = SchoolDataLoader(tmp_path / "absent").load()
        assert data.is_empty
        assert data.summary() == {key: 0 for key in data.summary()}

    def test_missing_files(self, data_dir):
        (data_dir / REGISTRATION_FILE).unlink()
        loader = SchoolDataLoader(data_dir)
        assert loader.missing_files() == [REGISTRATION_FILE]
        assert loader.load().registrations == []

    def test_missing_files_empty_dir(self, tmp_path):
        assert SchoolDataLoader(tmp_path).missing_files() == INPUT_FILES

    def test_unreadable_table_treated_as_empty(self, data_dir):
        (data_dir / ROOM_FILE).write_text("room_id,room_name\nR1,A\nR2,B,C,D\n", encoding="utf-8")
        data = SchoolDataLoader(data_dir).load()
        assert data.rooms == []
        assert len(data.subjects) == 5

    def test_rows_without_key_skipped(self, tmp_path):
        (tmp_path / SUBJECT_FILE).write_text(
            "subject_id,subject_name,theory,practice,credit\n"
            "MATH101,Mathematics,2,0,3\n"
            ",Orphan,1,1,1\n",
            encoding="utf-8",
        )
        data = load_school_data(tmp_path)
        assert [s.id for s in data.subjects] == ["MATH101"]

    def test_bad_period_counts_default_to_zero(self, tmp_path):
        (tmp_path / SUBJECT_FILE).write_text(
            "subject_id,subject_name,theory,practice,credit\n"
            "X1,Odd,two,-3,\n",
            encoding="utf-8",
        )
        subject = load_school_data(tmp_path).subjects[0]
        assert subject.theory_periods == 0
        assert subject.practice_periods == 0
        assert subject.credit == 0

    def test_role_and_category_parsing(self, tmp_path):
        (tmp_path / TEACHER_FILE).write_text(
            "teacher_id,teacher_name,role\nM1,Boss,manager\nT1,Jane,\n",
            encoding="utf-8",
        )
        (tmp_path / ROOM_FILE).write_text(
            "room_id,room_name,room_type\nL1,Lab,computer_lab\nX1,Gym,Gym\n",
            encoding="utf-8",
        )
        data = load_school_data(tmp_path)
        assert [t.role for t in data.teachers] == [TeacherRole.MANAGER, TeacherRole.REGULAR]
        assert [r.category for r in data.rooms] == [RoomCategory.COMPUTER_LAB, RoomCategory.OTHER]

    def test_advisor_column_split(self, tmp_path):
        (tmp_path / GROUP_FILE).write_text(
            "group_id,group_name,student_count,advisor\nG1,IT-1,30,ครูสมชาย / Jane\n",
            encoding="utf-8",
        )
        group = load_school_data(tmp_path).groups[0]
        assert group.advisor_names == ("ครูสมชาย", "Jane")
        assert group.student_count == 30
