"""Merging of shared-curriculum tasks across groups."""

import logging
from dataclasses import replace

from .models import ScheduleTask

logger = logging.getLogger(__name__)


def order_fixed_first(tasks: list[ScheduleTask]) -> list[ScheduleTask]:
    """Stable ordering with fixed-day tasks ahead of all others."""
    return sorted(tasks, key=lambda task: 0 if task.fixed_day else 1)


def can_merge(first: ScheduleTask, second: ScheduleTask) -> bool:
    """Two common tasks merge when subject, session kind and duration match."""
    return (
        first.is_common
        and second.is_common
        and first.subject_id == second.subject_id
        and first.session_kind == second.session_kind
        and first.duration == second.duration
    )


def merge_common_tasks(tasks: list[ScheduleTask]) -> list[ScheduleTask]:
    """Coalesce common tasks that represent the same shared session.

    Tasks are scanned once, left to right, after ordering fixed-day tasks
    first. Each unconsumed common task absorbs the groups of the first later
    unconsumed task it can merge with; that partner is consumed. A task
    absorbs at most one partner, so three groups sharing a subject yield one
    two-group task and one single-group task.

    The input tasks are not modified.

    Args:
        tasks: Derived tasks

    Returns:
        Task list in merge-scan order, some tasks carrying several groups
    """
    ordered = [
        replace(task, groups=list(task.groups))
        for task in order_fixed_first(tasks)
    ]
    consumed: set[int] = set()
    merged: list[ScheduleTask] = []
    merge_count = 0

    for i, task in enumerate(ordered):
        if i in consumed:
            continue
        consumed.add(i)

        if task.is_common:
            for j in range(i + 1, len(ordered)):
                if j in consumed:
                    continue
                partner = ordered[j]
                if can_merge(task, partner):
                    task.groups.extend(
                        g for g in partner.groups if g not in task.groups
                    )
                    consumed.add(j)
                    merge_count += 1
                    logger.debug(f"Merged {partner.label} into {task.label}")
                    break

        merged.append(task)

    logger.info(f"Merged {merge_count} common task pairs, {len(merged)} tasks remain")
    return merged
