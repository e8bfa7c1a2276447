"""Room availability, utilization and guarded deletion."""

import logging
from collections.abc import Sequence
from datetime import time

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from educenter.core.exceptions import ConflictError, ResourceNotFoundError
from educenter.models.enrollment import StudentGroup
from educenter.models.group import ACTIVE_GROUP_STATUSES, Group, GroupScheduleSlot
from educenter.models.room import Room
from educenter.schemas.common import Page, Pagination
from educenter.schemas.room import (
    CapacityDistribution,
    DaySlots,
    OccupyingGroup,
    RoomAvailabilityOut,
    RoomAvailabilityStats,
    RoomDetailOut,
    RoomGroupOut,
    RoomOut,
    RoomStatistics,
    RoomUtilization,
)
from educenter.services.schedule import BUSINESS_HOURS_SLOTS, empty_day_counter, format_time

logger = logging.getLogger(__name__)

ROOM_SORT_COLUMNS = {
    "name": Room.name,
    "capacity": Room.capacity,
    "created": Room.created_at,
}


def get_room_or_404(db: Session, room_id: str) -> Room:
    room = db.get(Room, room_id)
    if room is None:
        raise ResourceNotFoundError("Room", room_id)
    return room


def _occupied_slots(
    db: Session, room_id: str, days: Sequence[str], exclude_group_id: str | None = None
) -> set[tuple[str, time]]:
    """(day, start_time) pairs held by active groups in the room on ``days``."""
    query = (
        select(GroupScheduleSlot.day, Group.start_time)
        .join(Group, Group.id == GroupScheduleSlot.group_id)
        .where(
            Group.room_id == room_id,
            Group.status.in_(ACTIVE_GROUP_STATUSES),
            Group.start_time.is_not(None),
            GroupScheduleSlot.day.in_(list(days)),
        )
    )
    if exclude_group_id:
        query = query.where(Group.id != exclude_group_id)
    return {(day, start_time) for day, start_time in db.execute(query).all()}


def check_availability(
    db: Session,
    room_id: str,
    days: Sequence[str],
    start_time: time,
    exclude_group_id: str | None = None,
) -> RoomAvailabilityOut:
    room = get_room_or_404(db, room_id)

    on_days = select(GroupScheduleSlot.group_id).where(GroupScheduleSlot.day.in_(list(days)))
    query = (
        select(Group)
        .where(
            Group.room_id == room_id,
            Group.start_time == start_time,
            Group.status.in_(ACTIVE_GROUP_STATUSES),
            Group.id.in_(on_days),
        )
        .order_by(Group.created_at, Group.id)
    )
    if exclude_group_id:
        query = query.where(Group.id != exclude_group_id)
    occupying = db.execute(query).scalars().all()

    is_available = not occupying
    available_slots = None
    if not is_available:
        taken = _occupied_slots(db, room_id, days, exclude_group_id)
        available_slots = [
            DaySlots(
                day=day,
                slots=[format_time(slot) for slot in BUSINESS_HOURS_SLOTS if (day, slot) not in taken],
            )
            for day in days
        ]

    return RoomAvailabilityOut(
        room_id=room.id,
        room_name=room.name,
        is_available=is_available,
        conflicting_groups=[
            OccupyingGroup(
                id=group.id,
                name=group.name,
                days=list(group.days or []),
                time=format_time(group.start_time) or "Unknown",
            )
            for group in occupying
        ],
        available_time_slots=available_slots,
    )


def _active_group_count(db: Session, room_id: str) -> int:
    return db.execute(
        select(func.count())
        .select_from(Group)
        .where(Group.room_id == room_id, Group.status.in_(ACTIVE_GROUP_STATUSES))
    ).scalar_one()


def _utilization_rate(db: Session, room: Room) -> int:
    students = db.execute(
        select(func.count())
        .select_from(StudentGroup)
        .join(Group, Group.id == StudentGroup.group_id)
        .where(Group.room_id == room.id, Group.status.in_(ACTIVE_GROUP_STATUSES))
    ).scalar_one()
    return round(students / room.capacity * 100) if room.capacity else 0


def to_room_out(db: Session, room: Room) -> RoomOut:
    group_count = db.execute(
        select(func.count()).select_from(Group).where(Group.room_id == room.id)
    ).scalar_one()
    active = _active_group_count(db, room.id)
    return RoomOut.model_validate(room).model_copy(
        update={
            "group_count": group_count,
            "current_groups": active,
            "is_available": active == 0,
            "utilization_rate": _utilization_rate(db, room),
        }
    )


def list_rooms(
    db: Session,
    pagination: Pagination,
    *,
    branch_id: str | None = None,
    search: str | None = None,
    min_capacity: int | None = None,
    max_capacity: int | None = None,
    available: bool | None = None,
    sort_by: str = "name",
    sort_order: str = "asc",
) -> Page[RoomOut]:
    active_rooms = select(Group.room_id).where(
        Group.room_id.is_not(None), Group.status.in_(ACTIVE_GROUP_STATUSES)
    )
    clauses = []
    if branch_id:
        clauses.append(Room.branch_id == branch_id)
    if search:
        clauses.append(Room.name.ilike(f"%{search.strip()}%"))
    if min_capacity is not None:
        clauses.append(Room.capacity >= min_capacity)
    if max_capacity is not None:
        clauses.append(Room.capacity <= max_capacity)
    if available is True:
        clauses.append(Room.id.not_in(active_rooms))
    elif available is False:
        clauses.append(Room.id.in_(active_rooms))

    column = ROOM_SORT_COLUMNS.get(sort_by, Room.name)
    ordering = column.desc() if sort_order == "desc" else column.asc()
    total = db.execute(select(func.count()).select_from(Room).where(*clauses)).scalar_one()
    rooms = db.execute(
        select(Room).where(*clauses).order_by(ordering, Room.id).offset(pagination.offset).limit(pagination.limit)
    ).scalars().all()
    return Page[RoomOut](data=[to_room_out(db, room) for room in rooms], meta=pagination.meta(total))


def get_room_detail(db: Session, room_id: str) -> RoomDetailOut:
    room = get_room_or_404(db, room_id)
    groups = db.execute(
        select(Group).where(Group.room_id == room_id).order_by(Group.created_at.desc(), Group.id)
    ).scalars().all()
    rows = db.execute(
        select(StudentGroup.group_id, func.count())
        .where(StudentGroup.group_id.in_([group.id for group in groups]))
        .group_by(StudentGroup.group_id)
    ).all() if groups else []
    counts = dict(rows)

    group_items = [
        RoomGroupOut.model_validate(group).model_copy(update={"student_count": counts.get(group.id, 0)})
        for group in groups
    ]
    peak_days = empty_day_counter()
    for group in groups:
        if group.status in ACTIVE_GROUP_STATUSES:
            for day in group.days or []:
                if day in peak_days:
                    peak_days[day] += 1

    total_groups = len(groups)
    total_students = sum(counts.values())
    metrics = RoomUtilization(
        total_groups=total_groups,
        active_groups=sum(1 for group in groups if group.status in ACTIVE_GROUP_STATUSES),
        total_students=total_students,
        average_group_size=round(total_students / total_groups) if total_groups else 0,
        capacity_utilization=round(total_students / room.capacity * 100) if room.capacity else 0,
        peak_days_usage=peak_days,
    )
    base = to_room_out(db, room)
    return RoomDetailOut(**base.model_dump(), groups=group_items, utilization_metrics=metrics)


def remove_room(db: Session, room_id: str) -> None:
    room = get_room_or_404(db, room_id)
    active = _active_group_count(db, room_id)
    if active:
        logger.warning("Refused to delete room %s with %d active group(s)", room_id, active)
        raise ConflictError(f"Cannot delete room: it has {active} active groups", details={"activeGroups": active})
    # Completed groups keep their history without the room.
    db.execute(update(Group).where(Group.room_id == room_id).values(room_id=None))
    db.execute(update(GroupScheduleSlot).where(GroupScheduleSlot.room_id == room_id).values(room_id=None))
    db.delete(room)
    db.commit()
    logger.info("Deleted room %s", room_id)


def room_statistics(db: Session, branch_id: str | None = None) -> RoomStatistics:
    scope = [Room.branch_id == branch_id] if branch_id else []
    total, total_capacity, average_capacity = db.execute(
        select(func.count(), func.coalesce(func.sum(Room.capacity), 0), func.coalesce(func.avg(Room.capacity), 0))
        .select_from(Room)
        .where(*scope)
    ).one()

    def count_where(*clauses) -> int:
        return db.execute(select(func.count()).select_from(Room).where(*scope, *clauses)).scalar_one()

    active_rooms = select(Group.room_id).where(
        Group.room_id.is_not(None), Group.status.in_(ACTIVE_GROUP_STATUSES)
    )
    occupied = count_where(Room.id.in_(active_rooms))
    return RoomStatistics(
        total=total,
        total_capacity=int(total_capacity),
        average_capacity=round(float(average_capacity)),
        capacity_distribution=CapacityDistribution(
            small=count_where(Room.capacity <= 20),
            medium=count_where(Room.capacity.between(21, 50)),
            large=count_where(Room.capacity >= 51),
        ),
        availability_stats=RoomAvailabilityStats(available=total - occupied, occupied=occupied),
    )
