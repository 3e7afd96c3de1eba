"""Resource calendar: occupancy of groups, teachers and rooms for one run."""

from collections.abc import Iterable

from ..models import Teacher
from .models import ResourceKind


class ResourceCalendar:
    """Tracks which (resource, day, period) cells are booked.

    Three independent occupancy maps are kept, one per resource kind:
    - group: which groups have a class at each (day, period)
    - teacher: which teachers are teaching (or in a meeting)
    - room: which rooms are in use

    Bookings are never cancelled within a run. The calendar is owned by a
    single placement engine for the duration of one run and is not shared.
    """

    def __init__(self) -> None:
        # kind -> set of (resource_id, day, period)
        self._booked: dict[ResourceKind, set[tuple[str, str, int]]] = {
            kind: set() for kind in ResourceKind
        }

    def is_busy(self, kind: ResourceKind, resource_id: str, day: str, period: int) -> bool:
        """Check whether a cell is booked. Unknown ids are free."""
        return (resource_id, day, period) in self._booked[kind]

    def book(self, kind: ResourceKind, resource_id: str, day: str, period: int) -> None:
        """Mark a cell as booked. Booking twice is a no-op."""
        self._booked[kind].add((resource_id, day, period))

    def is_span_free(
        self, kind: ResourceKind, resource_id: str, day: str, periods: Iterable[int]
    ) -> bool:
        """Check that a resource is free in every period of a span."""
        return not any(self.is_busy(kind, resource_id, day, p) for p in periods)

    def any_busy(
        self,
        kind: ResourceKind,
        resource_ids: Iterable[str],
        day: str,
        periods: Iterable[int],
    ) -> bool:
        """Check whether any of the resources is booked anywhere in the span."""
        periods = list(periods)
        return any(
            not self.is_span_free(kind, resource_id, day, periods)
            for resource_id in resource_ids
        )

    def book_many(
        self,
        group_ids: Iterable[str],
        teacher_id: str | None,
        room_id: str | None,
        day: str,
        periods: Iterable[int],
    ) -> None:
        """Book every resource implicated by one placement.

        The full set of cells is computed before anything is recorded, so
        later queries never observe a partially booked placement.

        Args:
            group_ids: Groups attending the session
            teacher_id: Teacher, or None for an unbound session
            room_id: Room, or None
            day: Day of the session
            periods: Periods covered by the session
        """
        periods = list(periods)
        cells: list[tuple[ResourceKind, tuple[str, str, int]]] = []
        for group_id in group_ids:
            cells.extend((ResourceKind.GROUP, (group_id, day, p)) for p in periods)
        if teacher_id:
            cells.extend((ResourceKind.TEACHER, (teacher_id, day, p)) for p in periods)
        if room_id:
            cells.extend((ResourceKind.ROOM, (room_id, day, p)) for p in periods)

        for kind, cell in cells:
            self._booked[kind].add(cell)

    def reserve_manager_meetings(
        self, teachers: Iterable[Teacher], day: str, period: int
    ) -> list[str]:
        """Pre-book the standing meeting cell for every manager.

        Returns:
            Ids of the teachers that were reserved
        """
        reserved = []
        for teacher in teachers:
            if teacher.is_manager:
                self.book(ResourceKind.TEACHER, teacher.id, day, period)
                reserved.append(teacher.id)
        return reserved

    def booked_cells(self, kind: ResourceKind) -> set[tuple[str, str, int]]:
        """Copy of all booked (resource_id, day, period) cells of a kind."""
        return set(self._booked[kind])
