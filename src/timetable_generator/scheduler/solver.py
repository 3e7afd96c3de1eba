"""CP-SAT placement strategy using OR-Tools.

Uses the same static rules, task list and output contract as the greedy
engine but searches all placements jointly, maximizing placed periods.
"""

import logging
import time
from collections import defaultdict
from dataclasses import dataclass

from ortools.sat.python import cp_model

from ..constants import DAYS
from ..models import SchoolData
from .calendar import ResourceCalendar
from .config import SOLVER_CP_SAT, EngineConfig
from .engine import UNASSIGNED_TEACHER, PlacementRules, build_statistics
from .models import (
    Placement,
    ResourceKind,
    ScheduleAssignment,
    ScheduleResult,
    ScheduleTask,
    UnplacedReason,
    UnplacedTask,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidatePlacement:
    """A statically valid placement of one task occurrence."""

    task_index: int
    placement: Placement


class CpSatModelBuilder:
    """Builds the CP-SAT model for a task list.

    Variables: x[i] = 1 if candidate placement i is used.
    Constraints:
    - a task uses at most `occurrences` of its candidates
    - each group cell is covered at most once
    - teacher and room cells are covered at most once by regular sessions;
      activity sessions may share a cell with each other but not with a
      regular session
    Objective: maximize placed periods.
    """

    def __init__(
        self,
        rules: PlacementRules,
        tasks: list[ScheduleTask],
        calendar: ResourceCalendar,
    ) -> None:
        self.rules = rules
        self.tasks = tasks
        self.calendar = calendar
        self.model = cp_model.CpModel()
        self.candidates: list[CandidatePlacement] = []
        self.x: list[cp_model.IntVar] = []

    def build(self) -> cp_model.CpModel:
        self._create_variables()
        self._add_occurrence_limits()
        self._add_group_constraints()
        self._add_shared_resource_constraints(ResourceKind.TEACHER)
        self._add_shared_resource_constraints(ResourceKind.ROOM)
        if self.x:
            self.model.Maximize(
                sum(
                    self.tasks[c.task_index].duration * var
                    for c, var in zip(self.candidates, self.x)
                )
            )
        return self.model

    def _create_variables(self) -> None:
        for task_index, task in enumerate(self.tasks):
            for placement in self._enumerate(task):
                self.candidates.append(CandidatePlacement(task_index, placement))
                self.x.append(self.model.NewBoolVar(f"x_{len(self.x)}"))
        logger.info(
            f"CP-SAT model: {len(self.x)} candidate placements for {len(self.tasks)} tasks"
        )

    def _enumerate(self, task: ScheduleTask):
        """Yield placements that pass every static and pre-booked check."""
        rooms = self.rules.room_options(task)
        for day in self.rules.candidate_days(task):
            for start in self.rules.candidate_starts(task):
                periods = range(start, start + task.duration)
                if self.calendar.any_busy(ResourceKind.GROUP, task.groups, day, periods):
                    continue
                for teacher_id in self.rules.candidate_teachers(task):
                    if (
                        teacher_id is not UNASSIGNED_TEACHER
                        and not task.is_activity
                        and not self.calendar.is_span_free(
                            ResourceKind.TEACHER, teacher_id, day, periods
                        )
                    ):
                        continue
                    for room_id in rooms:
                        if (
                            not task.is_homeroom
                            and not task.is_activity
                            and not self.calendar.is_span_free(
                                ResourceKind.ROOM, room_id, day, periods
                            )
                        ):
                            continue
                        yield Placement(day, start, task.duration, teacher_id, room_id)
                        if task.is_homeroom:
                            break

    def _add_occurrence_limits(self) -> None:
        by_task: dict[int, list[cp_model.IntVar]] = defaultdict(list)
        for candidate, var in zip(self.candidates, self.x):
            by_task[candidate.task_index].append(var)
        for task_index, variables in by_task.items():
            self.model.Add(sum(variables) <= self.tasks[task_index].occurrences)

    def _cells(self, candidate: CandidatePlacement, kind: ResourceKind):
        task = self.tasks[candidate.task_index]
        placement = candidate.placement
        if kind == ResourceKind.GROUP:
            resources = task.groups
        elif kind == ResourceKind.TEACHER:
            resources = [placement.teacher_id] if placement.teacher_id else []
        else:
            resources = [] if task.is_homeroom else [placement.room_id]
        for resource_id in resources:
            for period in placement.periods:
                yield (resource_id, placement.day, period)

    def _add_group_constraints(self) -> None:
        cells: dict[tuple[str, str, int], list[cp_model.IntVar]] = defaultdict(list)
        for candidate, var in zip(self.candidates, self.x):
            for cell in self._cells(candidate, ResourceKind.GROUP):
                cells[cell].append(var)
        for variables in cells.values():
            if len(variables) > 1:
                self.model.AddAtMostOne(variables)

    def _add_shared_resource_constraints(self, kind: ResourceKind) -> None:
        regular: dict[tuple[str, str, int], list[cp_model.IntVar]] = defaultdict(list)
        activity: dict[tuple[str, str, int], list[cp_model.IntVar]] = defaultdict(list)
        for candidate, var in zip(self.candidates, self.x):
            target = activity if self.tasks[candidate.task_index].is_activity else regular
            for cell in self._cells(candidate, kind):
                target[cell].append(var)

        for cell, variables in regular.items():
            if len(variables) > 1:
                self.model.AddAtMostOne(variables)
            for activity_var in activity.get(cell, []):
                self.model.Add(sum(variables) + activity_var <= 1)


class CpSatPlacementEngine:
    """Placement engine backed by the OR-Tools CP-SAT solver.

    Drop-in alternative to PlacementEngine: same tasks in, same
    ScheduleResult out. Runs single-threaded with a fixed seed so repeated
    runs on the same input give the same schedule.
    """

    name = SOLVER_CP_SAT

    def __init__(
        self,
        data: SchoolData,
        config: EngineConfig | None = None,
        calendar: ResourceCalendar | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.rules = PlacementRules(data, self.config)
        self.calendar = calendar if calendar is not None else ResourceCalendar()
        self.calendar.reserve_manager_meetings(
            data.teachers,
            self.config.manager_meeting_day,
            self.config.manager_meeting_period,
        )

    def schedule(self, tasks: list[ScheduleTask]) -> ScheduleResult:
        """Solve placement for all tasks and book the chosen placements."""
        started = time.perf_counter()

        builder = CpSatModelBuilder(self.rules, tasks, self.calendar)
        model = builder.build()

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.config.time_limit
        solver.parameters.num_workers = 1
        solver.parameters.random_seed = self.config.seed or 0
        solver.parameters.log_search_progress = False

        logger.info("Starting CP-SAT solver...")
        status = solver.Solve(model)

        chosen: dict[int, list[Placement]] = defaultdict(list)
        reason = UnplacedReason.NO_SLOT_AVAILABLE
        if status in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            if status == cp_model.OPTIMAL:
                logger.info("Found optimal solution")
            else:
                logger.info("Found feasible solution (may not be optimal)")
            for candidate, var in zip(builder.candidates, builder.x):
                if solver.Value(var):
                    chosen[candidate.task_index].append(candidate.placement)
        else:
            logger.warning(f"Solver returned status: {solver.StatusName(status)}")
            reason = UnplacedReason.SOLVER_TIMEOUT

        assignments: list[ScheduleAssignment] = []
        unplaced: list[UnplacedTask] = []
        placed_count = 0
        unplaced_count = 0
        for task_index, task in enumerate(tasks):
            placements = sorted(
                chosen.get(task_index, []), key=lambda p: (DAYS.index(p.day), p.start_period)
            )
            for placement in placements:
                self.calendar.book_many(
                    task.groups,
                    placement.teacher_id,
                    None if task.is_homeroom else placement.room_id,
                    placement.day,
                    placement.periods,
                )
                assignments.extend(self.rules.assignments_for(task, placement))
            placed_count += len(placements)

            missing = task.occurrences - len(placements)
            if missing > 0:
                unplaced_count += missing
                logger.warning(f"Unscheduled: {task.label} x{missing}")
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
