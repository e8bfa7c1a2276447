"""Teacher and room double-booking detection for groups.

Two groups collide on a resource when they share the teacher (or room), have
at least one weekday in common and start at exactly the same time. Groups of
every status are considered; the slot table's unique indexes only guard the
active ones.
"""

import logging
from collections.abc import Sequence
from datetime import time

from sqlalchemy import select
from sqlalchemy.orm import Session

from educenter.core.exceptions import ScheduleConflictError
from educenter.models.group import Group, GroupScheduleSlot
from educenter.schemas.conflict import ConflictRecord, ConflictType
from educenter.services.schedule import format_time, intersect_days

logger = logging.getLogger(__name__)


def _groups_sharing_slot(
    db: Session,
    resource_clause,
    *,
    days: Sequence[str],
    start_time: time,
    exclude_group_id: str | None,
) -> list[Group]:
    on_days = select(GroupScheduleSlot.group_id).where(GroupScheduleSlot.day.in_(list(days)))
    query = (
        select(Group)
        .where(resource_clause, Group.start_time == start_time, Group.id.in_(on_days))
        .order_by(Group.created_at, Group.id)
    )
    if exclude_group_id:
        query = query.where(Group.id != exclude_group_id)
    return list(db.execute(query).scalars())


def _records(
    groups: list[Group], conflict_type: ConflictType, days: Sequence[str], start_time: time
) -> list[ConflictRecord]:
    records: list[ConflictRecord] = []
    for group in groups:
        shared = intersect_days(days, group.days or [])
        if not shared:
            continue
        records.append(
            ConflictRecord(
                conflict_type=conflict_type,
                conflicting_group_id=group.id,
                conflicting_group_name=group.name,
                conflict_days=shared,
                conflict_time=format_time(start_time),
            )
        )
    return records


def find_schedule_conflicts(
    db: Session,
    *,
    days: Sequence[str],
    start_time: time | None,
    teacher_id: str | None = None,
    room_id: str | None = None,
    exclude_group_id: str | None = None,
) -> list[ConflictRecord]:
    """Return every conflict for the candidate schedule, teacher conflicts first."""
    if not days or start_time is None:
        return []

    conflicts: list[ConflictRecord] = []
    if teacher_id:
        groups = _groups_sharing_slot(
            db,
            Group.teacher_id == teacher_id,
            days=days,
            start_time=start_time,
            exclude_group_id=exclude_group_id,
        )
        conflicts.extend(_records(groups, ConflictType.teacher, days, start_time))
    if room_id:
        groups = _groups_sharing_slot(
            db,
            Group.room_id == room_id,
            days=days,
            start_time=start_time,
            exclude_group_id=exclude_group_id,
        )
        conflicts.extend(_records(groups, ConflictType.room, days, start_time))
    return conflicts


def ensure_no_conflicts(
    db: Session,
    *,
    days: Sequence[str],
    start_time: time | None,
    teacher_id: str | None = None,
    room_id: str | None = None,
    exclude_group_id: str | None = None,
) -> None:
    conflicts = find_schedule_conflicts(
        db,
        days=days,
        start_time=start_time,
        teacher_id=teacher_id,
        room_id=room_id,
        exclude_group_id=exclude_group_id,
    )
    if conflicts:
        logger.warning(
            "Schedule conflict: %d record(s) for teacher=%s room=%s days=%s at %s",
            len(conflicts),
            teacher_id,
            room_id,
            ",".join(days),
            format_time(start_time),
        )
        raise ScheduleConflictError(conflicts)
