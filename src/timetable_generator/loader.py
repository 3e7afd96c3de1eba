"""Entity loader: reads the input CSV tables into typed school entities."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pandas as pd

from .constants import (
    GROUP_FILE,
    INPUT_FILES,
    QUALIFICATION_FILE,
    REGISTRATION_FILE,
    ROOM_FILE,
    SUBJECT_FILE,
    TEACHER_FILE,
    TIMESLOT_FILE,
)
from .exceptions import InputTableError
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
from .normalization import clean_header, split_advisor_names
from .utils import safe_int, safe_str

logger = logging.getLogger(__name__)


def read_table(path: Path | str) -> pd.DataFrame:
    """Read one CSV table with normalized headers.

    All cells are read as strings; blank cells become empty strings.
    A missing file yields an empty DataFrame.

    Args:
        path: Path to the CSV file

    Returns:
        DataFrame with normalized column names

    Raises:
        InputTableError: If the file exists but cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"Table {path.name} not found, treating as empty")
        return pd.DataFrame()

    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise InputTableError(str(path), str(e)) from e

    df.columns = [clean_header(column) for column in df.columns]
    return df


class SchoolDataLoader:
    """Loads all seven input tables from a data directory.

    Tables are independent, so they are read concurrently; the returned
    SchoolData is complete before any scheduling starts.
    """

    def __init__(self, data_dir: Path | str, max_workers: int = len(INPUT_FILES)):
        """Initialize the loader.

        Args:
            data_dir: Directory containing the input CSV files
            max_workers: Thread pool size for concurrent reads
        """
        self.data_dir = Path(data_dir)
        self.max_workers = max_workers

    def load(self) -> SchoolData:
        """Load every table and convert rows to entities."""
        tables = self._read_all()

        data = SchoolData(
            subjects=self._subjects(tables[SUBJECT_FILE]),
            teachers=self._teachers(tables[TEACHER_FILE]),
            rooms=self._rooms(tables[ROOM_FILE]),
            groups=self._groups(tables[GROUP_FILE]),
            timeslots=self._timeslots(tables[TIMESLOT_FILE]),
            qualifications=self._qualifications(tables[QUALIFICATION_FILE]),
            registrations=self._registrations(tables[REGISTRATION_FILE]),
        )
        logger.info(f"Loaded school data from {self.data_dir}: {data.summary()}")
        return data

    def missing_files(self) -> list[str]:
        """Names of input files absent from the data directory."""
        return [name for name in INPUT_FILES if not (self.data_dir / name).exists()]

    def _read_all(self) -> dict[str, pd.DataFrame]:
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                name: pool.submit(read_table, self.data_dir / name)
                for name in INPUT_FILES
            }

        tables: dict[str, pd.DataFrame] = {}
        for name, future in futures.items():
            try:
                tables[name] = future.result()
            except InputTableError as e:
                logger.error(f"{e}; treating as empty")
                tables[name] = pd.DataFrame()
        return tables

    @staticmethod
    def _rows(df: pd.DataFrame, key: str):
        """Yield row dicts that have a non-empty value in the key column."""
        if df.empty or key not in df.columns:
            return
        for row in df.to_dict("records"):
            if safe_str(row.get(key)):
                yield row

    def _subjects(self, df: pd.DataFrame) -> list[Subject]:
        return [
            Subject(
                id=safe_str(row["subject_id"]),
                name=safe_str(row.get("subject_name")),
                theory_periods=max(0, safe_int(row.get("theory"))),
                practice_periods=max(0, safe_int(row.get("practice"))),
                credit=safe_int(row.get("credit")),
            )
            for row in self._rows(df, "subject_id")
        ]

    def _teachers(self, df: pd.DataFrame) -> list[Teacher]:
        return [
            Teacher(
                id=safe_str(row["teacher_id"]),
                name=safe_str(row.get("teacher_name")),
                role=TeacherRole.parse(safe_str(row.get("role"))),
            )
            for row in self._rows(df, "teacher_id")
        ]

    def _rooms(self, df: pd.DataFrame) -> list[Room]:
        return [
            Room(
                id=safe_str(row["room_id"]),
                name=safe_str(row.get("room_name")),
                category=RoomCategory.parse(safe_str(row.get("room_type"))),
            )
            for row in self._rows(df, "room_id")
        ]

    def _groups(self, df: pd.DataFrame) -> list[StudentGroup]:
        return [
            StudentGroup(
                id=safe_str(row["group_id"]),
                name=safe_str(row.get("group_name")),
                student_count=safe_int(row.get("student_count")),
                advisor_names=tuple(split_advisor_names(row.get("advisor"))),
            )
            for row in self._rows(df, "group_id")
        ]

    def _timeslots(self, df: pd.DataFrame) -> list[Timeslot]:
        return [
            Timeslot(
                id=safe_str(row["timeslot_id"]),
                day=safe_str(row.get("day")),
                period=safe_int(row.get("period")),
                start=safe_str(row.get("start")),
                end=safe_str(row.get("end")),
            )
            for row in self._rows(df, "timeslot_id")
        ]

    def _qualifications(self, df: pd.DataFrame) -> list[Qualification]:
        return [
            Qualification(
                teacher_id=safe_str(row["teacher_id"]),
                subject_id=safe_str(row.get("subject_id")),
            )
            for row in self._rows(df, "teacher_id")
            if safe_str(row.get("subject_id"))
        ]

    def _registrations(self, df: pd.DataFrame) -> list[Registration]:
        return [
            Registration(
                group_id=safe_str(row["group_id"]),
                subject_id=safe_str(row.get("subject_id")),
            )
            for row in self._rows(df, "group_id")
            if safe_str(row.get("subject_id"))
        ]


def load_school_data(data_dir: Path | str) -> SchoolData:
    """Load all input tables from a data directory."""
    return SchoolDataLoader(data_dir).load()
