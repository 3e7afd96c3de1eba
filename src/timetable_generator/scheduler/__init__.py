"""Greedy weekly timetable placement with an optional OR-Tools CP-SAT strategy.

Main pieces:
- derive_tasks: turns registrations into sessions to place
- merge_common_tasks: pairs identical shared-curriculum sessions
- PlacementEngine: first-fit greedy constructor (default)
- CpSatPlacementEngine: CP-SAT model over the same candidate placements

Usage:
    from timetable_generator.scheduler import EngineConfig, generate_schedule

    result = generate_schedule(data, EngineConfig(seed=42))
    print(result.total_assigned, result.total_unplaced_periods)
"""

from .calendar import ResourceCalendar
from .config import (
    AVAILABLE_SOLVERS,
    SOLVER_CP_SAT,
    SOLVER_GREEDY,
    EngineConfig,
    config_from_dict,
    load_engine_config,
)
from .engine import UNASSIGNED_TEACHER, PlacementEngine, PlacementRules
from .merger import merge_common_tasks
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
from .pipeline import create_engine, generate_schedule
from .solver import CpSatPlacementEngine
from .tasks import derive_tasks

__all__ = [
    # Pipeline
    "generate_schedule",
    "create_engine",
    "derive_tasks",
    "merge_common_tasks",
    # Engines
    "PlacementEngine",
    "CpSatPlacementEngine",
    "PlacementRules",
    "ResourceCalendar",
    "UNASSIGNED_TEACHER",
    # Configuration
    "EngineConfig",
    "config_from_dict",
    "load_engine_config",
    "AVAILABLE_SOLVERS",
    "SOLVER_GREEDY",
    "SOLVER_CP_SAT",
    # Models
    "ScheduleTask",
    "SessionKind",
    "ResourceKind",
    "Placement",
    "ScheduleAssignment",
    "UnplacedTask",
    "UnplacedReason",
    "ScheduleStatistics",
    "ScheduleResult",
]
