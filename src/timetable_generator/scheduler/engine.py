"""Greedy first-fit placement engine."""

import logging
import random
import time
from collections import defaultdict

from ..constants import DAYS, FIRST_PERIOD
from ..models import RoomCategory, SchoolData
from .calendar import ResourceCalendar
from .config import SOLVER_GREEDY, EngineConfig
from .models import (
    Placement,
    ResourceKind,
    ScheduleAssignment,
    ScheduleResult,
    ScheduleStatistics,
    ScheduleTask,
    SessionKind,
    UnplacedReason,
    UnplacedTask,
)

logger = logging.getLogger(__name__)

# Candidate used when no teacher can be bound; never blocks, yields an empty teacher_id
UNASSIGNED_TEACHER = None


class PlacementRules:
    """Static placement rules shared by every placement strategy.

    Answers which teachers, days, start periods and rooms a task may use,
    independent of what has already been booked.
    """

    def __init__(self, data: SchoolData, config: EngineConfig) -> None:
        self.data = data
        self.config = config
        self.qualified = data.qualified_teachers()
        self.timeslot_ids = data.timeslot_ids()
        rooms_by_id = data.rooms_by_id

        home_rooms = [r.id for r in data.rooms if r.category == RoomCategory.HOME]
        self.home_room_id = home_rooms[0] if home_rooms else config.home_room_id
        self.iot_room_id = config.iot_room_id if config.iot_room_id in rooms_by_id else None

    def candidate_teachers(self, task: ScheduleTask) -> list[str | None]:
        """Teachers to try for a task, in order.

        Homeroom tasks use only their resolved advisor. Other tasks use their
        qualified teachers; with none qualified the unassigned sentinel is used.
        """
        if task.is_homeroom:
            return [task.advisor_teacher_id or UNASSIGNED_TEACHER]
        candidates: list[str | None] = list(self.qualified.get(task.subject_id, []))
        return candidates or [UNASSIGNED_TEACHER]

    def candidate_days(self, task: ScheduleTask, rng: random.Random | None = None) -> list[str]:
        """Days to try. Activity tasks get their pinned day only."""
        if task.is_activity:
            return [self.config.activity_day]
        days = list(DAYS)
        if rng is not None and self.config.shuffle_days:
            rng.shuffle(days)
        return days

    def candidate_starts(self, task: ScheduleTask) -> list[int]:
        """Start periods whose span avoids lunch and respects end bounds."""
        if task.is_activity:
            starts = [self.config.activity_start_period]
        else:
            starts = list(range(FIRST_PERIOD, self.config.last_period + 1))
        return [p for p in starts if self.is_valid_span(task, p)]

    def is_valid_span(self, task: ScheduleTask, start: int) -> bool:
        end = start + task.duration - 1
        if start < FIRST_PERIOD or end > self.config.last_period:
            return False
        if start <= self.config.lunch_period <= end:
            return False
        if task.session_kind in (SessionKind.THEORY, SessionKind.HOMEROOM):
            return end <= self.config.theory_last_period
        return True

    def room_options(self, task: ScheduleTask) -> list[str]:
        """Rooms a task may use, in scan order.

        Homeroom tasks use the home placeholder. IoT tasks use only the
        designated IoT room (none if it does not exist). Everything else
        scans rooms of an allowed category, skipping the IoT room.
        """
        if task.is_homeroom:
            return [self.home_room_id]
        if task.is_iot:
            return [self.iot_room_id] if self.iot_room_id else []

        allowed = set(self.config.allowed_room_categories(task.session_kind))
        return [
            room.id
            for room in self.data.rooms
            if room.id != self.config.iot_room_id and room.category in allowed
        ]

    def timeslot_id(self, day: str, period: int) -> str:
        return self.timeslot_ids.get((day, period), f"{day}_{period}")

    def assignments_for(
        self, task: ScheduleTask, placement: Placement
    ) -> list[ScheduleAssignment]:
        """One output row per group per period of the placement."""
        teacher_id = placement.teacher_id or ""
        return [
            ScheduleAssignment(
                group_id=group_id,
                timeslot_id=self.timeslot_id(placement.day, period),
                day=placement.day,
                period=period,
                subject_id=task.subject_id,
                teacher_id=teacher_id,
                room_id=placement.room_id,
            )
            for period in placement.periods
            for group_id in task.groups
        ]


def build_statistics(
    assignments: list[ScheduleAssignment],
    tasks: list[ScheduleTask],
    placed: int,
    unplaced: int,
    solver: str,
    elapsed: float,
) -> ScheduleStatistics:
    by_day: dict[str, int] = defaultdict(int)
    by_room: dict[str, int] = defaultdict(int)
    for assignment in assignments:
        by_day[assignment.day] += 1
        by_room[assignment.room_id] += 1

    return ScheduleStatistics(
        total_tasks=len(tasks),
        merged_tasks=sum(1 for task in tasks if len(task.groups) > 1),
        occurrences_placed=placed,
        occurrences_unplaced=unplaced,
        by_day=dict(by_day),
        by_room=dict(by_room),
        solver=solver,
        solver_time_seconds=elapsed,
    )


class PlacementEngine:
    """First-fit greedy constructor over (day, period, teacher, room).

    Tasks are placed in list order, each occurrence independently. The first
    fully valid combination is booked; nothing is ever undone, so the result
    is neither optimal nor guaranteed feasible for over-constrained input.

    Activity tasks may double-book teachers and rooms (supervised parallel
    activity blocks) but never groups.
    """

    name = SOLVER_GREEDY

    def __init__(
        self,
        data: SchoolData,
        config: EngineConfig | None = None,
        calendar: ResourceCalendar | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            data: Loaded school data
            config: Engine configuration (defaults if omitted)
            calendar: Calendar to book into; a fresh one is created if omitted
            rng: Random source for day ordering; seeded from config.seed if omitted
        """
        self.config = config or EngineConfig()
        self.rules = PlacementRules(data, self.config)
        self.calendar = calendar if calendar is not None else ResourceCalendar()
        self.rng = rng if rng is not None else random.Random(self.config.seed)

        managers = self.calendar.reserve_manager_meetings(
            data.teachers,
            self.config.manager_meeting_day,
            self.config.manager_meeting_period,
        )
        if managers:
            logger.debug(f"Reserved manager meeting for {', '.join(managers)}")

    def schedule(self, tasks: list[ScheduleTask]) -> ScheduleResult:
        """Place every occurrence of every task.

        Args:
            tasks: Tasks in placement order (usually the merger's output)

        Returns:
            ScheduleResult with assignments and unplaced diagnostics
        """
        started = time.perf_counter()
        assignments: list[ScheduleAssignment] = []
        unplaced: list[UnplacedTask] = []
        placed_count = 0
        unplaced_count = 0

        for task in tasks:
            missing = 0
            reason = UnplacedReason.NO_SLOT_AVAILABLE
            for occurrence in range(task.occurrences):
                placement, failure = self.place_occurrence(task)
                if placement is None:
                    missing += 1
                    reason = failure
                    logger.warning(
                        f"Unscheduled: {task.label} occurrence {occurrence + 1}/"
                        f"{task.occurrences} ({failure.value})"
                    )
                    continue
                assignments.extend(self.rules.assignments_for(task, placement))
                placed_count += 1

            if missing:
                unplaced_count += missing
                unplaced.append(
                    UnplacedTask(
                        subject_id=task.subject_id,
                        groups=list(task.groups),
                        session_kind=task.session_kind,
                        missing_occurrences=missing,
                        missing_periods=missing * task.duration,
                        reason=reason,
                    )
                )

        elapsed = time.perf_counter() - started
        logger.info(
            f"Placed {placed_count} occurrences ({len(assignments)} rows), "
            f"{unplaced_count} unplaced in {elapsed:.2f}s"
        )
        return ScheduleResult(
            assignments=assignments,
            unplaced=unplaced,
            statistics=build_statistics(
                assignments, tasks, placed_count, unplaced_count, self.name, elapsed
            ),
            seed=self.config.seed,
        )

    def place_occurrence(
        self, task: ScheduleTask
    ) -> tuple[Placement | None, UnplacedReason]:
        """Find, book and return the first valid placement for one occurrence.

        Returns:
            (placement, reason). Placement is None when nothing fits; reason
            then names the furthest check that failed.
        """
        # Furthest check passed: 0 nothing, 1 a start existed, 2 groups free, 3 teacher free
        progress = 0
        starts = self.rules.candidate_starts(task)
        teachers = self.rules.candidate_teachers(task)

        for day in self.rules.candidate_days(task, self.rng):
            for start in starts:
                progress = max(progress, 1)
                periods = range(start, start + task.duration)
                if self.calendar.any_busy(ResourceKind.GROUP, task.groups, day, periods):
                    continue
                progress = max(progress, 2)

                for teacher_id in teachers:
                    if not self._teacher_ok(task, teacher_id, day, periods):
                        continue
                    progress = max(progress, 3)

                    room_id = self.resolve_room(task, day, periods)
                    if room_id is None:
                        continue

                    placement = Placement(day, start, task.duration, teacher_id, room_id)
                    booked_room = None if task.is_homeroom else room_id
                    self.calendar.book_many(
                        task.groups, teacher_id, booked_room, day, placement.periods
                    )
                    logger.debug(
                        f"Placed {task.label} on {day} P{start}-"
                        f"{start + task.duration - 1} teacher={teacher_id or '-'} "
                        f"room={room_id}"
                    )
                    return placement, UnplacedReason.NO_SLOT_AVAILABLE

        reasons = {
            0: UnplacedReason.NO_SLOT_AVAILABLE,
            1: UnplacedReason.GROUP_BUSY,
            2: UnplacedReason.TEACHER_BUSY,
            3: UnplacedReason.NO_ROOM_AVAILABLE,
        }
        return None, reasons[progress]

    def _teacher_ok(
        self, task: ScheduleTask, teacher_id: str | None, day: str, periods: range
    ) -> bool:
        if teacher_id is UNASSIGNED_TEACHER or task.is_activity:
            return True
        return self.calendar.is_span_free(ResourceKind.TEACHER, teacher_id, day, periods)

    def resolve_room(self, task: ScheduleTask, day: str, periods: range) -> str | None:
        """Pick the room for a placement, or None if no allowed room is free.

        The home placeholder is never checked for occupancy. Activity tasks
        take the first allowed room regardless of occupancy.
        """
        options = self.rules.room_options(task)
        if task.is_homeroom or task.is_activity:
            return options[0] if options else None

        for room_id in options:
            if self.calendar.is_span_free(ResourceKind.ROOM, room_id, day, periods):
                return room_id
        return None
