"""Task derivation: expands registrations into schedulable tasks."""

import logging

from ..constants import HOMEROOM_SUBJECT_ID
from ..models import SchoolData, StudentGroup, Subject, Teacher
from ..normalization import normalize_person_name
from .config import EngineConfig
from .models import ScheduleTask, SessionKind

logger = logging.getLogger(__name__)


def build_teacher_name_index(
    teachers: list[Teacher], prefixes: list[str] | None = None
) -> dict[str, str]:
    """Map normalized teacher first names to teacher ids.

    When two teachers normalize to the same name, the one declared first wins.
    """
    index: dict[str, str] = {}
    for teacher in teachers:
        key = normalize_person_name(teacher.name, prefixes)
        if key and key not in index:
            index[key] = teacher.id
    return index


def resolve_advisor(
    group: StudentGroup | None,
    name_index: dict[str, str],
    prefixes: list[str] | None = None,
) -> str | None:
    """Resolve a group's homeroom teacher from its advisor names.

    Advisor names are tried in order; the first that matches a teacher wins.

    Args:
        group: Student group, or None for a group missing from the table
        name_index: Output of build_teacher_name_index
        prefixes: Honorific prefixes to strip

    Returns:
        Teacher id, or None if no advisor name matches
    """
    if group is None:
        return None
    for advisor in group.advisor_names:
        key = normalize_person_name(advisor, prefixes)
        if key in name_index:
            return name_index[key]
    return None


def subject_tasks(group_id: str, subject: Subject, config: EngineConfig) -> list[ScheduleTask]:
    """Build the theory and practice tasks for one registration.

    Activity subjects are placed as one double-length block per session kind.
    """
    is_activity = config.is_activity(subject.id)
    flags = {
        "is_activity": is_activity,
        "is_common": config.is_common(subject.id),
        "is_iot": config.is_iot(subject.id, subject.name),
        "fixed_day": is_activity,
    }

    tasks = []
    if subject.theory_periods > 0:
        tasks.append(
            ScheduleTask(
                subject_id=subject.id,
                groups=[group_id],
                session_kind=SessionKind.THEORY,
                duration=config.activity_duration if is_activity else 1,
                occurrences=1 if is_activity else subject.theory_periods,
                **flags,
            )
        )
    if subject.practice_periods > 0:
        tasks.append(
            ScheduleTask(
                subject_id=subject.id,
                groups=[group_id],
                session_kind=SessionKind.PRACTICE,
                duration=(
                    config.activity_duration if is_activity else subject.practice_periods
                ),
                occurrences=1,
                **flags,
            )
        )
    return tasks


def homeroom_task(group_id: str, advisor_teacher_id: str | None) -> ScheduleTask:
    return ScheduleTask(
        subject_id=HOMEROOM_SUBJECT_ID,
        groups=[group_id],
        session_kind=SessionKind.HOMEROOM,
        duration=1,
        occurrences=1,
        is_homeroom=True,
        advisor_teacher_id=advisor_teacher_id,
    )


def derive_tasks(data: SchoolData, config: EngineConfig) -> list[ScheduleTask]:
    """Expand every group's registrations into schedulable tasks.

    Groups are visited in the order they first appear in the registrations,
    followed by groups that register nothing. Each group gets its subject
    tasks in registration order, then one homeroom task.

    Args:
        data: Loaded school data
        config: Engine configuration

    Returns:
        Tasks, one group each
    """
    subjects = data.subjects_by_id
    groups = data.groups_by_id
    name_index = build_teacher_name_index(data.teachers, config.honorific_prefixes)

    registrations_by_group: dict[str, list[str]] = {}
    for registration in data.registrations:
        registrations_by_group.setdefault(registration.group_id, []).append(
            registration.subject_id
        )
    for group in data.groups:
        registrations_by_group.setdefault(group.id, [])

    tasks: list[ScheduleTask] = []
    unresolved_advisors = 0
    for group_id, subject_ids in registrations_by_group.items():
        for subject_id in subject_ids:
            subject = subjects.get(subject_id)
            if subject is None:
                logger.warning(
                    f"Group {group_id} registers unknown subject {subject_id}, skipping"
                )
                continue
            tasks.extend(subject_tasks(group_id, subject, config))

        advisor_id = resolve_advisor(
            groups.get(group_id), name_index, config.honorific_prefixes
        )
        if advisor_id is None:
            unresolved_advisors += 1
            logger.debug(f"No advisor teacher resolved for group {group_id}")
        tasks.append(homeroom_task(group_id, advisor_id))

    logger.info(
        f"Derived {len(tasks)} tasks ({sum(t.required_periods for t in tasks)} periods) "
        f"for {len(registrations_by_group)} groups "
        f"({unresolved_advisors} homerooms without advisor)"
    )
    return tasks
