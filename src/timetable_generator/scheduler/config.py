"""Engine configuration: the school's scheduling rules expressed as data."""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from ..constants import DAYS, LAST_PERIOD
from ..exceptions import ConfigError, UnknownSolverError
from ..models import RoomCategory
from ..normalization import DEFAULT_HONORIFIC_PREFIXES
from .models import SessionKind

SOLVER_GREEDY = "greedy"
SOLVER_CP_SAT = "cp-sat"
AVAILABLE_SOLVERS = [SOLVER_GREEDY, SOLVER_CP_SAT]

# Default CP-SAT time limit in seconds
DEFAULT_TIME_LIMIT = 60

# Activity subjects: school-wide clubs/scouting sessions held in one fixed block
DEFAULT_ACTIVITY_SUBJECT_IDS = [
    "20000-2002",
    "20000-2005",
    "20000-2007",
    "30000-2002",
    "30000-2004",
]

# General-education subject code prefixes shared by every programme
DEFAULT_COMMON_PREFIXES = ["20000", "30000"]

PRACTICE_ROOM_CATEGORIES = [
    RoomCategory.COMPUTER_LAB,
    RoomCategory.NETWORK_LAB,
    RoomCategory.AI_LAB,
    RoomCategory.IOT_LAB,
    RoomCategory.FACTORY,
    RoomCategory.ENGLISH_LAB,
    RoomCategory.GRAPHICS_LAB,
    RoomCategory.PRACTICE,
]


def _default_room_categories() -> dict[SessionKind, list[RoomCategory]]:
    return {
        SessionKind.THEORY: [RoomCategory.THEORY],
        SessionKind.PRACTICE: list(PRACTICE_ROOM_CATEGORIES),
    }


@dataclass
class EngineConfig:
    """Domain rules injected into task derivation and placement.

    Attributes:
        activity_subject_ids: Subjects pinned to the activity block
        activity_day: Day of the activity block
        activity_start_period: First period of the activity block
        activity_duration: Periods an activity session spans
        common_prefixes: Subject id prefixes of mergeable shared curriculum
        iot_marker: Substring of subject id or name marking IoT subjects
        iot_room_id: Room reserved for IoT subjects
        home_room_id: Placeholder room used when no HOME room is declared
        manager_meeting_day: Day of the standing manager meeting
        manager_meeting_period: Period of the standing manager meeting
        lunch_period: Period nobody is scheduled in
        last_period: Last period of the day
        theory_last_period: Last period a theory or homeroom session may occupy
        room_categories: Allowed room categories per session kind
        honorific_prefixes: Prefixes stripped when matching advisor names
        shuffle_days: Randomize day search order per occurrence
        seed: Seed for the day-order random source (None for unseeded)
        solver: Placement strategy name
        time_limit: CP-SAT time limit in seconds
    """

    activity_subject_ids: list[str] = field(
        default_factory=lambda: list(DEFAULT_ACTIVITY_SUBJECT_IDS)
    )
    activity_day: str = "Wed"
    activity_start_period: int = 8
    activity_duration: int = 2
    common_prefixes: list[str] = field(
        default_factory=lambda: list(DEFAULT_COMMON_PREFIXES)
    )
    iot_marker: str = "IOT"
    iot_room_id: str = "R6201"
    home_room_id: str = "R_HOME"
    manager_meeting_day: str = "Tue"
    manager_meeting_period: int = 8
    lunch_period: int = 5
    last_period: int = LAST_PERIOD
    theory_last_period: int = 9
    room_categories: dict[SessionKind, list[RoomCategory]] = field(
        default_factory=_default_room_categories
    )
    honorific_prefixes: list[str] = field(
        default_factory=lambda: list(DEFAULT_HONORIFIC_PREFIXES)
    )
    shuffle_days: bool = True
    seed: int | None = None
    solver: str = SOLVER_GREEDY
    time_limit: int = DEFAULT_TIME_LIMIT

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check value ranges and cross-field consistency.

        Raises:
            ConfigError: If a value is out of range
        """
        for key in ("activity_day", "manager_meeting_day"):
            if getattr(self, key) not in DAYS:
                raise ConfigError(
                    f"must be one of {', '.join(DAYS)}, got '{getattr(self, key)}'",
                    key=key,
                )
        if not self.lunch_period < self.last_period <= LAST_PERIOD:
            raise ConfigError(
                f"must be after lunch_period ({self.lunch_period}) and at most "
                f"{LAST_PERIOD}, got {self.last_period}",
                key="last_period",
            )
        for key in (
            "activity_start_period",
            "manager_meeting_period",
            "lunch_period",
            "theory_last_period",
        ):
            value = getattr(self, key)
            if not 1 <= value <= self.last_period:
                raise ConfigError(
                    f"must be between 1 and {self.last_period}, got {value}", key=key
                )
        if self.activity_duration < 1:
            raise ConfigError("must be at least 1", key="activity_duration")
        if self.time_limit <= 0:
            raise ConfigError("must be positive", key="time_limit")
        if self.solver not in AVAILABLE_SOLVERS:
            raise UnknownSolverError(self.solver, AVAILABLE_SOLVERS)

    def is_activity(self, subject_id: str) -> bool:
        return subject_id in self.activity_subject_ids

    def is_common(self, subject_id: str) -> bool:
        """Shared-curriculum subjects are mergeable unless they are activities."""
        if self.is_activity(subject_id):
            return False
        return any(subject_id.startswith(prefix) for prefix in self.common_prefixes)

    def is_iot(self, subject_id: str, subject_name: str = "") -> bool:
        if not self.iot_marker:
            return False
        return self.iot_marker in subject_id or self.iot_marker in subject_name

    def allowed_room_categories(self, kind: SessionKind) -> list[RoomCategory]:
        return self.room_categories.get(kind, [])

    def with_overrides(self, **overrides: Any) -> "EngineConfig":
        """Return a copy with the given non-None fields replaced."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


_LIST_OF_STR_KEYS = {"activity_subject_ids", "common_prefixes", "honorific_prefixes"}


def _parse_room_categories(raw: Any) -> dict[SessionKind, list[RoomCategory]]:
    if not isinstance(raw, dict):
        raise ConfigError("must be an object", key="room_categories")

    categories = _default_room_categories()
    for kind_name, names in raw.items():
        try:
            kind = SessionKind(str(kind_name).lower())
        except ValueError as e:
            raise ConfigError(
                f"unknown session kind '{kind_name}'", key="room_categories"
            ) from e
        if not isinstance(names, list):
            raise ConfigError(
                f"categories for '{kind_name}' must be a list", key="room_categories"
            )
        parsed = [RoomCategory.parse(name) for name in names]
        if RoomCategory.OTHER in parsed and not any(
            str(name).strip().lower() == "other" for name in names
        ):
            raise ConfigError(
                f"unknown room category in {names}", key="room_categories"
            )
        categories[kind] = parsed
    return categories


def config_from_dict(data: dict[str, Any]) -> EngineConfig:
    """Build an EngineConfig from a plain dictionary of overrides.

    Args:
        data: Mapping of EngineConfig field names to values

    Returns:
        EngineConfig with defaults for omitted keys

    Raises:
        ConfigError: If a key is unknown or a value has the wrong type
    """
    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown keys: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, value in data.items():
        if key == "room_categories":
            values[key] = _parse_room_categories(value)
        elif key in _LIST_OF_STR_KEYS:
            if not isinstance(value, list):
                raise ConfigError("must be a list of strings", key=key)
            values[key] = [str(item) for item in value]
        else:
            values[key] = value

    try:
        return EngineConfig(**values)
    except TypeError as e:
        raise ConfigError(str(e)) from e


def load_engine_config(path: Path | str | None = None) -> EngineConfig:
    """Load engine configuration from a JSON file.

    Args:
        path: Path to a JSON object of overrides. None returns the defaults.

    Returns:
        EngineConfig

    Raises:
        ConfigError: If the file is unreadable or invalid
    """
    if path is None:
        return EngineConfig()

    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    return config_from_dict(data)
