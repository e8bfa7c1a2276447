"""Group lifecycle: create, update, delete, listing and statistics."""

import logging
from dataclasses import dataclass
from datetime import date, time

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from educenter.core.exceptions import ConflictError, ResourceNotFoundError, ScheduleConflictError, ValidationError
from educenter.models.course import Course
from educenter.models.enrollment import StudentGroup
from educenter.models.group import ACTIVE_GROUP_STATUSES, Group, GroupScheduleSlot, GroupStatus
from educenter.models.teacher import Teacher
from educenter.schemas.common import Page, Pagination
from educenter.schemas.group import (
    EnrolledStudent,
    GroupCreate,
    GroupDetailOut,
    GroupOut,
    GroupStatistics,
    GroupStatusCounts,
    GroupUpdate,
    check_date_range,
)
from educenter.services.conflict_service import ensure_no_conflicts, find_schedule_conflicts
from educenter.services.resources import validate_group_dependencies
from educenter.services.schedule import empty_day_counter

logger = logging.getLogger(__name__)

DEPENDENCY_FIELDS = frozenset({"course_id", "branch_id", "teacher_id", "room_id"})
SCHEDULE_FIELDS = frozenset({"teacher_id", "room_id", "days", "start_time"})


@dataclass(frozen=True)
class GroupFilters:
    """Optional list filters. Range filters apply only when both bounds are set."""

    branch_id: str | None = None
    course_id: str | None = None
    teacher_id: str | None = None
    room_id: str | None = None
    status: GroupStatus | None = None
    days: tuple[str, ...] = ()
    search: str | None = None
    start_date_from: date | None = None
    start_date_to: date | None = None
    end_date_from: date | None = None
    end_date_to: date | None = None
    start_time_from: time | None = None
    start_time_to: time | None = None

    def predicates(self) -> list:
        clauses = []
        if self.branch_id:
            clauses.append(Group.branch_id == self.branch_id)
        if self.course_id:
            clauses.append(Group.course_id == self.course_id)
        if self.teacher_id:
            clauses.append(Group.teacher_id == self.teacher_id)
        if self.room_id:
            clauses.append(Group.room_id == self.room_id)
        if self.status is not None:
            clauses.append(Group.status == self.status)
        if self.days:
            on_days = select(GroupScheduleSlot.group_id).where(GroupScheduleSlot.day.in_(list(self.days)))
            clauses.append(Group.id.in_(on_days))
        if self.search:
            pattern = f"%{self.search.strip()}%"
            clauses.append(
                or_(
                    Group.name.ilike(pattern),
                    Group.course.has(Course.name.ilike(pattern)),
                    Group.teacher.has(Teacher.fullname.ilike(pattern)),
                )
            )
        if self.start_date_from is not None and self.start_date_to is not None:
            clauses.append(Group.start_date.between(self.start_date_from, self.start_date_to))
        if self.end_date_from is not None and self.end_date_to is not None:
            clauses.append(Group.end_date.between(self.end_date_from, self.end_date_to))
        if self.start_time_from is not None and self.start_time_to is not None:
            clauses.append(Group.start_time.between(self.start_time_from, self.start_time_to))
        return clauses


def get_group_or_404(db: Session, group_id: str) -> Group:
    group = db.get(Group, group_id)
    if group is None:
        raise ResourceNotFoundError("Group", group_id)
    return group


def sync_schedule_slots(group: Group) -> None:
    """Mirror the group's days, time, teacher and room into its slot rows in place."""
    active = group.status in ACTIVE_GROUP_STATUSES
    existing = {slot.day: slot for slot in group.slots}
    for day in group.days:
        slot = existing.pop(day, None)
        if slot is None:
            slot = GroupScheduleSlot(day=day)
            group.slots.append(slot)
        slot.start_time = group.start_time
        slot.teacher_id = group.teacher_id
        slot.room_id = group.room_id
        slot.is_active = active
    for stale in existing.values():
        group.slots.remove(stale)


def _ensure_unique_name(db: Session, branch_id: str, name: str, *, exclude_id: str | None = None) -> None:
    query = select(func.count()).select_from(Group).where(Group.branch_id == branch_id, Group.name == name)
    if exclude_id is not None:
        query = query.where(Group.id != exclude_id)
    if db.execute(query).scalar_one():
        raise ConflictError("Group with this name already exists in the branch", details={"name": name})


def _commit(db: Session, candidate: dict, exclude_group_id: str | None) -> None:
    """Commit, translating unique-index violations into conflict errors."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        reason = str(exc.orig)
        if "group_schedule_slots" in reason:
            # Another writer took the slot between our check and our commit.
            conflicts = find_schedule_conflicts(
                db,
                days=candidate["days"],
                start_time=candidate["start_time"],
                teacher_id=candidate["teacher_id"],
                room_id=candidate["room_id"],
                exclude_group_id=exclude_group_id,
            )
            logger.warning("Schedule slot already taken at commit time for group %s", candidate["name"])
            if conflicts:
                raise ScheduleConflictError(conflicts) from exc
            raise ConflictError("Schedule conflict detected while saving the group") from exc
        if "groups" in reason:
            raise ConflictError(
                "Group with this name already exists in the branch", details={"name": candidate["name"]}
            ) from exc
        raise ConflictError("Group could not be saved") from exc


def _student_counts(db: Session, group_ids: list[str]) -> dict[str, int]:
    if not group_ids:
        return {}
    rows = db.execute(
        select(StudentGroup.group_id, func.count())
        .where(StudentGroup.group_id.in_(group_ids))
        .group_by(StudentGroup.group_id)
    ).all()
    return {group_id: count for group_id, count in rows}


def to_group_out(group: Group, student_count: int = 0) -> GroupOut:
    return GroupOut.model_validate(group).model_copy(update={"student_count": student_count})


def create_group(db: Session, payload: GroupCreate) -> GroupOut:
    validate_group_dependencies(
        db,
        course_id=payload.course_id,
        branch_id=payload.branch_id,
        teacher_id=payload.teacher_id,
        room_id=payload.room_id,
    )
    _ensure_unique_name(db, payload.branch_id, payload.name)
    ensure_no_conflicts(
        db,
        days=payload.days,
        start_time=payload.start_time,
        teacher_id=payload.teacher_id,
        room_id=payload.room_id,
    )

    group = Group(**payload.model_dump())
    sync_schedule_slots(group)
    db.add(group)
    _commit(db, payload.model_dump(), exclude_group_id=None)
    db.refresh(group)
    logger.info("Created group %s (%s) in branch %s", group.id, group.name, group.branch_id)
    return to_group_out(group)


def update_group(db: Session, group_id: str, payload: GroupUpdate) -> GroupOut:
    group = get_group_or_404(db, group_id)
    changes = payload.model_dump(exclude_unset=True)
    candidate = {
        field: changes.get(field, getattr(group, field))
        for field in (
            "name",
            "course_id",
            "branch_id",
            "teacher_id",
            "room_id",
            "status",
            "days",
            "start_time",
            "start_date",
            "end_date",
        )
    }

    try:
        check_date_range(candidate["start_date"], candidate["end_date"])
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    if DEPENDENCY_FIELDS & changes.keys():
        validate_group_dependencies(
            db,
            course_id=candidate["course_id"],
            branch_id=candidate["branch_id"],
            teacher_id=candidate["teacher_id"],
            room_id=candidate["room_id"],
        )
    if {"name", "branch_id"} & changes.keys():
        _ensure_unique_name(db, candidate["branch_id"], candidate["name"], exclude_id=group.id)
    if SCHEDULE_FIELDS & changes.keys():
        ensure_no_conflicts(
            db,
            days=candidate["days"],
            start_time=candidate["start_time"],
            teacher_id=candidate["teacher_id"],
            room_id=candidate["room_id"],
            exclude_group_id=group.id,
        )

    for key, value in changes.items():
        setattr(group, key, value)
    sync_schedule_slots(group)
    _commit(db, candidate, exclude_group_id=group_id)
    db.refresh(group)
    logger.info("Updated group %s (%s)", group.id, ", ".join(sorted(changes)) or "no changes")
    return to_group_out(group, _student_counts(db, [group.id]).get(group.id, 0))


def remove_group(db: Session, group_id: str) -> None:
    group = get_group_or_404(db, group_id)
    enrolled = db.execute(
        select(func.count()).select_from(StudentGroup).where(StudentGroup.group_id == group_id)
    ).scalar_one()
    if enrolled:
        logger.warning("Refused to delete group %s with %d enrolled student(s)", group_id, enrolled)
        raise ConflictError(
            "Cannot delete group with enrolled students. Please remove all students first.",
            details={"studentCount": enrolled},
        )
    db.delete(group)
    db.commit()
    logger.info("Deleted group %s", group_id)


def get_group_detail(db: Session, group_id: str) -> GroupDetailOut:
    group = get_group_or_404(db, group_id)
    enrollments = db.execute(
        select(StudentGroup).where(StudentGroup.group_id == group_id).order_by(StudentGroup.created_at)
    ).scalars().all()
    students = [EnrolledStudent.model_validate(item.student) for item in enrollments]
    base = to_group_out(group, len(students))
    return GroupDetailOut(**base.model_dump(), students=students)


def list_groups(db: Session, filters: GroupFilters, pagination: Pagination) -> Page[GroupOut]:
    clauses = filters.predicates()
    total = db.execute(select(func.count()).select_from(Group).where(*clauses)).scalar_one()
    groups = db.execute(
        select(Group)
        .where(*clauses)
        .order_by(Group.created_at.desc(), Group.id.desc())
        .offset(pagination.offset)
        .limit(pagination.limit)
    ).scalars().all()
    counts = _student_counts(db, [group.id for group in groups])
    return Page[GroupOut](
        data=[to_group_out(group, counts.get(group.id, 0)) for group in groups],
        meta=pagination.meta(total),
    )


def group_statistics(db: Session, branch_id: str | None = None) -> GroupStatistics:
    group_scope = [Group.branch_id == branch_id] if branch_id else []

    status_rows = db.execute(
        select(Group.status, func.count()).where(*group_scope).group_by(Group.status)
    ).all()
    by_status = {status: count for status, count in status_rows}
    total = sum(by_status.values())

    by_days = empty_day_counter()
    day_rows = db.execute(
        select(GroupScheduleSlot.day, func.count())
        .join(Group, Group.id == GroupScheduleSlot.group_id)
        .where(*group_scope)
        .group_by(GroupScheduleSlot.day)
    ).all()
    for day, count in day_rows:
        if day in by_days:
            by_days[day] = count

    enrollment_query = select(func.count()).select_from(StudentGroup)
    if branch_id:
        enrollment_query = enrollment_query.join(Group, Group.id == StudentGroup.group_id).where(
            Group.branch_id == branch_id
        )
    total_students = db.execute(enrollment_query).scalar_one()

    return GroupStatistics(
        total=total,
        by_status=GroupStatusCounts(
            planned=by_status.get(GroupStatus.planned, 0),
            ongoing=by_status.get(GroupStatus.ongoing, 0),
            completed=by_status.get(GroupStatus.completed, 0),
        ),
        by_days=by_days,
        average_students_per_group=round(total_students / total, 2) if total else 0,
        total_students=total_students,
    )
