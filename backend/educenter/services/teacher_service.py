import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from educenter.core.exceptions import ConflictError, ResourceNotFoundError
from educenter.core.security import get_password_hash
from educenter.models.branch import Branch
from educenter.models.group import Group, GroupScheduleSlot, GroupStatus
from educenter.models.teacher import Gender, Teacher, TeacherStatus
from educenter.schemas.common import Page, Pagination
from educenter.schemas.teacher import (
    TeacherCreate,
    TeacherGroupSummary,
    TeacherOut,
    TeachersByBranch,
    TeacherStats,
    TeacherUpdate,
)
from educenter.services.resources import ensure_unique_email, require_branch

logger = logging.getLogger(__name__)


def get_teacher_or_404(db: Session, teacher_id: str) -> Teacher:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return teacher


def teacher_groups(db: Session, teacher_id: str) -> list[TeacherGroupSummary]:
    groups = db.execute(
        select(Group).where(Group.teacher_id == teacher_id).order_by(Group.created_at.desc(), Group.id)
    ).scalars().all()
    return [
        TeacherGroupSummary(
            id=group.id,
            name=group.name,
            status=group.status.value,
            course_name=group.course.name if group.course else None,
        )
        for group in groups
    ]


def to_teacher_out(db: Session, teacher: Teacher, *, with_groups: bool = False) -> TeacherOut:
    out = TeacherOut.model_validate(teacher)
    if with_groups:
        out = out.model_copy(update={"groups": teacher_groups(db, teacher.id)})
    return out


def _ongoing_group_count(db: Session, teacher_id: str) -> int:
    return db.execute(
        select(func.count())
        .select_from(Group)
        .where(Group.teacher_id == teacher_id, Group.status == GroupStatus.ongoing)
    ).scalar_one()


def create_teacher(db: Session, payload: TeacherCreate) -> TeacherOut:
    require_branch(db, payload.branch_id)
    ensure_unique_email(db, Teacher, payload.email)
    data = payload.model_dump(exclude={"password"})
    teacher = Teacher(**data)
    if payload.password:
        teacher.hashed_password = get_password_hash(payload.password)
    db.add(teacher)
    db.commit()
    db.refresh(teacher)
    logger.info("Created teacher %s (%s)", teacher.id, teacher.fullname)
    return to_teacher_out(db, teacher)


def list_teachers(
    db: Session,
    pagination: Pagination,
    *,
    branch_id: str | None = None,
    status: TeacherStatus | None = None,
    gender: Gender | None = None,
    search: str | None = None,
) -> Page[TeacherOut]:
    clauses = []
    if branch_id:
        clauses.append(Teacher.branch_id == branch_id)
    if status is not None:
        clauses.append(Teacher.status == status)
    if gender is not None:
        clauses.append(Teacher.gender == gender)
    if search:
        pattern = f"%{search.strip()}%"
        clauses.append(
            or_(Teacher.fullname.ilike(pattern), Teacher.phone.ilike(pattern), Teacher.email.ilike(pattern))
        )
    total = db.execute(select(func.count()).select_from(Teacher).where(*clauses)).scalar_one()
    teachers = db.execute(
        select(Teacher)
        .where(*clauses)
        .order_by(Teacher.created_at.desc(), Teacher.id)
        .offset(pagination.offset)
        .limit(pagination.limit)
    ).scalars().all()
    return Page[TeacherOut](data=[to_teacher_out(db, item) for item in teachers], meta=pagination.meta(total))


def update_teacher(db: Session, teacher_id: str, payload: TeacherUpdate) -> TeacherOut:
    teacher = get_teacher_or_404(db, teacher_id)
    data = payload.model_dump(exclude_unset=True)
    password = data.pop("password", None)
    if data.get("branch_id") and data["branch_id"] != teacher.branch_id:
        require_branch(db, data["branch_id"])
    if data.get("email"):
        ensure_unique_email(db, Teacher, data["email"], exclude_id=teacher_id)
    if data.get("status") == TeacherStatus.inactive:
        _guard_deactivation(db, teacher_id)

    for key, value in data.items():
        setattr(teacher, key, value)
    if password:
        teacher.hashed_password = get_password_hash(password)
    db.commit()
    db.refresh(teacher)
    logger.info("Updated teacher %s", teacher_id)
    return to_teacher_out(db, teacher, with_groups=True)


def _guard_deactivation(db: Session, teacher_id: str) -> None:
    ongoing = _ongoing_group_count(db, teacher_id)
    if ongoing:
        logger.warning("Refused to deactivate teacher %s with %d ongoing group(s)", teacher_id, ongoing)
        raise ConflictError(
            f"Cannot deactivate teacher. Teacher has {ongoing} active group(s). Please reassign the groups first.",
            details={"activeGroups": ongoing},
        )


def update_teacher_status(db: Session, teacher_id: str, status: TeacherStatus) -> TeacherOut:
    teacher = get_teacher_or_404(db, teacher_id)
    if status == TeacherStatus.inactive:
        _guard_deactivation(db, teacher_id)
    teacher.status = status
    db.commit()
    db.refresh(teacher)
    logger.info("Teacher %s status set to %s", teacher_id, status.value)
    return to_teacher_out(db, teacher, with_groups=True)


def remove_teacher(db: Session, teacher_id: str) -> str:
    teacher = get_teacher_or_404(db, teacher_id)
    ongoing = _ongoing_group_count(db, teacher_id)
    if ongoing:
        logger.warning("Refused to delete teacher %s with %d ongoing group(s)", teacher_id, ongoing)
        raise ConflictError(
            f"Cannot delete teacher. Teacher has {ongoing} active group(s). "
            "Please reassign or complete the groups first.",
            details={"activeGroups": ongoing},
        )
    fullname = teacher.fullname
    db.execute(update(Group).where(Group.teacher_id == teacher_id).values(teacher_id=None))
    db.execute(update(GroupScheduleSlot).where(GroupScheduleSlot.teacher_id == teacher_id).values(teacher_id=None))
    db.delete(teacher)
    db.commit()
    logger.info("Deleted teacher %s (%s)", teacher_id, fullname)
    return fullname


def teacher_stats(db: Session) -> TeacherStats:
    def count(*clauses) -> int:
        return db.execute(select(func.count()).select_from(Teacher).where(*clauses)).scalar_one()

    with_groups = db.execute(
        select(func.count(func.distinct(Group.teacher_id))).where(Group.teacher_id.is_not(None))
    ).scalar_one()
    total_groups = db.execute(
        select(func.count()).select_from(Group).where(Group.teacher_id.is_not(None))
    ).scalar_one()
    by_branch_rows = db.execute(
        select(Branch.id, Branch.name, func.count(Teacher.id))
        .join(Teacher, Teacher.branch_id == Branch.id)
        .group_by(Branch.id, Branch.name)
        .order_by(func.count(Teacher.id).desc(), Branch.name)
    ).all()

    return TeacherStats(
        total_teachers=count(),
        active_teachers=count(Teacher.status == TeacherStatus.active),
        inactive_teachers=count(Teacher.status == TeacherStatus.inactive),
        male_teachers=count(Teacher.gender == Gender.male),
        female_teachers=count(Teacher.gender == Gender.female),
        teachers_with_groups=with_groups,
        total_groups=total_groups,
        teachers_by_branch=[
            TeachersByBranch(branch_id=branch_id, branch_name=name, teacher_count=teacher_count)
            for branch_id, name, teacher_count in by_branch_rows
        ],
    )
