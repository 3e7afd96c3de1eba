"""Generation runner: load, schedule, write and report for one data set."""

import logging
import random
import threading
from dataclasses import dataclass
from pathlib import Path

from .constants import OUTPUT_FILE
from .exceptions import GenerationInProgressError
from .exporters import write_assignments_csv
from .loader import SchoolDataLoader
from .models import SchoolData
from .report import DiagnosticsReport, build_report
from .scheduler.config import EngineConfig
from .scheduler.models import ScheduleResult
from .scheduler.pipeline import generate_schedule

logger = logging.getLogger(__name__)


@dataclass
class GenerationOutcome:
    """Everything a finished run produced."""

    data: SchoolData
    result: ScheduleResult
    report: DiagnosticsReport
    output_path: Path


class GenerationRunner:
    """Runs generation against one data directory, one run at a time.

    A second generate() while a run is executing raises
    GenerationInProgressError instead of waiting.
    """

    def __init__(
        self,
        data_dir: Path | str,
        config: EngineConfig | None = None,
        output_path: Path | str | None = None,
    ):
        """Initialize runner.

        Args:
            data_dir: Directory holding the input tables
            config: Engine configuration (defaults if omitted)
            output_path: Output CSV path (data_dir/output.csv if omitted)
        """
        self.data_dir = Path(data_dir)
        self.config = config or EngineConfig()
        self.output_path = (
            Path(output_path) if output_path else self.data_dir / OUTPUT_FILE
        )
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def generate(self, rng: random.Random | None = None) -> GenerationOutcome:
        """Load tables, place all tasks, overwrite the output and build diagnostics.

        Args:
            rng: Day-order random source (seeded from config.seed if omitted)

        Returns:
            GenerationOutcome for the run

        Raises:
            GenerationInProgressError: If another run is in progress
        """
        if not self._lock.acquire(blocking=False):
            raise GenerationInProgressError(str(self.data_dir))

        try:
            logger.info(f"Generating timetable for {self.data_dir}")
            loader = SchoolDataLoader(self.data_dir)
            for name in loader.missing_files():
                logger.warning(f"Missing input table {name}, treating as empty")
            data = loader.load()
            if data.is_empty:
                logger.warning(f"No groups or registrations found in {self.data_dir}")
            result = generate_schedule(data, self.config, rng=rng)

            write_assignments_csv(result.assignments, self.output_path)
            logger.info(
                f"Wrote {result.total_assigned} rows to {self.output_path}"
            )

            report = build_report(data, result.assignments)
            if not report.is_complete:
                logger.warning(
                    f"{report.missing_periods} of {report.expected_periods} "
                    f"registered periods could not be placed"
                )
            return GenerationOutcome(
                data=data,
                result=result,
                report=report,
                output_path=self.output_path,
            )
        finally:
            self._lock.release()
