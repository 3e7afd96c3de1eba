"""Custom exceptions for the timetable generator."""


class TimetableError(Exception):
    """Base exception for timetable generator errors."""

    pass


class InputTableError(TimetableError):
    """An input table could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read table '{path}': {reason}")


class ConfigError(TimetableError):
    """Engine configuration is invalid."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        location = f" (key '{key}')" if key else ""
        super().__init__(f"Invalid engine configuration{location}: {message}")


class UnknownSolverError(ConfigError):
    """Requested placement strategy does not exist."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(
            f"Unknown solver '{name}'. Available: {', '.join(available)}",
            key="solver",
        )


class GenerationInProgressError(TimetableError):
    """A generation run is already executing against the same data set."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        super().__init__(
            f"A timetable generation run is already in progress for '{data_dir}'"
        )
