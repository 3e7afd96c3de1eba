"""Derive, merge and place: the scheduling pipeline for one run."""

import logging
import random

from ..exceptions import UnknownSolverError
from ..models import SchoolData
from .calendar import ResourceCalendar
from .config import AVAILABLE_SOLVERS, SOLVER_CP_SAT, SOLVER_GREEDY, EngineConfig
from .engine import PlacementEngine
from .merger import merge_common_tasks
from .models import ScheduleResult
from .solver import CpSatPlacementEngine
from .tasks import derive_tasks

logger = logging.getLogger(__name__)


def create_engine(
    data: SchoolData,
    config: EngineConfig,
    calendar: ResourceCalendar | None = None,
    rng: random.Random | None = None,
) -> PlacementEngine | CpSatPlacementEngine:
    """Create the placement engine named by config.solver.

    Args:
        data: Loaded school data
        config: Engine configuration
        calendar: Calendar for the run (fresh if omitted)
        rng: Day-order random source, greedy engine only

    Returns:
        Placement engine exposing schedule(tasks)
    """
    if config.solver == SOLVER_GREEDY:
        return PlacementEngine(data, config, calendar=calendar, rng=rng)
    if config.solver == SOLVER_CP_SAT:
        return CpSatPlacementEngine(data, config, calendar=calendar)
    raise UnknownSolverError(config.solver, AVAILABLE_SOLVERS)


def generate_schedule(
    data: SchoolData,
    config: EngineConfig | None = None,
    rng: random.Random | None = None,
) -> ScheduleResult:
    """Run task derivation, merging and placement on loaded data.

    Empty input yields an empty result, never an error.

    Args:
        data: Loaded school data
        config: Engine configuration (defaults if omitted)
        rng: Day-order random source (seeded from config.seed if omitted)

    Returns:
        ScheduleResult for the run
    """
    config = config or EngineConfig()
    tasks = derive_tasks(data, config)
    merged = merge_common_tasks(tasks)

    engine = create_engine(data, config, rng=rng)
    logger.info(f"Placing {len(merged)} tasks with the {engine.name} engine")
    return engine.schedule(merged)
