"""Per-viewer schedule views derived from the output table."""

import logging
from dataclasses import dataclass, replace
from enum import Enum

from .constants import DAYS
from .models import SchoolData
from .scheduler.models import ScheduleAssignment

logger = logging.getLogger(__name__)


class ViewType(str, Enum):
    """Whose timetable to show."""

    GROUP = "group"
    TEACHER = "teacher"
    ROOM = "room"


@dataclass(frozen=True)
class ViewCell:
    """One occupied period in a viewer's timetable, with names joined in."""

    subject_id: str
    subject_name: str
    teacher_name: str
    group_names: tuple[str, ...]
    room_id: str

    @property
    def session_key(self) -> tuple[str, str, str]:
        return (self.subject_id, self.teacher_name, self.room_id)


# resource id -> day -> period -> cells
ScheduleView = dict[str, dict[str, dict[int, list[ViewCell]]]]


def _view_key(assignment: ScheduleAssignment, view: ViewType) -> str:
    if view == ViewType.GROUP:
        return assignment.group_id
    if view == ViewType.TEACHER:
        return assignment.teacher_id
    return assignment.room_id


def display_names(data: SchoolData) -> dict[str, str]:
    """Labels like "T1 - Somchai" for groups, teachers and rooms."""
    names: dict[str, str] = {}
    for group in data.groups:
        names[group.id] = f"{group.id} - {group.name}" if group.name else group.id
    for teacher in data.teachers:
        names[teacher.id] = f"{teacher.id} - {teacher.name}" if teacher.name else teacher.id
    for room in data.rooms:
        names[room.id] = f"{room.id} - {room.name}" if room.name else room.id
    return names


def build_view(
    data: SchoolData,
    assignments: list[ScheduleAssignment],
    view: ViewType,
    selected_id: str | None = None,
) -> ScheduleView:
    """Filter the output rows into one timetable per viewer.

    Rows without a key for the view (e.g. no teacher bound) are skipped.
    Rows of one session (same subject, teacher and room) collapse into one
    cell listing every group. Distinct sessions sharing a teacher or room in
    the same period, such as parallel activity blocks, are all kept.

    Args:
        data: School data for name lookups
        assignments: Output rows
        view: Viewer kind
        selected_id: Restrict to one viewer; None for all

    Returns:
        Nested mapping resource id -> day -> period -> list of ViewCell
    """
    subjects = data.subjects_by_id
    teachers = data.teachers_by_id
    groups = data.groups_by_id

    result: ScheduleView = {}
    for assignment in assignments:
        key = _view_key(assignment, view)
        if not key or (selected_id is not None and key != selected_id):
            continue

        day_cells = result.setdefault(key, {day: {} for day in DAYS}).setdefault(
            assignment.day, {}
        )
        period_cells = day_cells.setdefault(assignment.period, [])
        group = groups.get(assignment.group_id)
        group_name = group.name if group and group.name else assignment.group_id

        subject = subjects.get(assignment.subject_id)
        teacher = teachers.get(assignment.teacher_id)
        cell = ViewCell(
            subject_id=assignment.subject_id,
            subject_name=subject.name if subject else assignment.subject_id,
            teacher_name=teacher.name if teacher else assignment.teacher_id,
            group_names=(group_name,),
            room_id=assignment.room_id,
        )

        for index, existing in enumerate(period_cells):
            if existing.session_key == cell.session_key:
                if group_name not in existing.group_names:
                    period_cells[index] = replace(
                        existing, group_names=existing.group_names + (group_name,)
                    )
                break
        else:
            if period_cells:
                logger.debug(
                    f"{view.value} {key} has {len(period_cells) + 1} sessions "
                    f"on {assignment.day} P{assignment.period}"
                )
            period_cells.append(cell)
    return result
