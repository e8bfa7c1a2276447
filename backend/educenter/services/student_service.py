import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from educenter.core.exceptions import ConflictError, ResourceNotFoundError
from educenter.core.security import get_password_hash
from educenter.models.enrollment import StudentGroup
from educenter.models.group import ACTIVE_GROUP_STATUSES, Group
from educenter.models.student import Student, StudentStatus
from educenter.models.teacher import Gender
from educenter.schemas.common import Page, Pagination
from educenter.schemas.student import (
    StudentCreate,
    StudentDetailOut,
    StudentEnrollmentStats,
    StudentGenderCounts,
    StudentGroupSummary,
    StudentOut,
    StudentStatistics,
    StudentStatusCounts,
    StudentUpdate,
)
from educenter.services.resources import ensure_unique_email, require_branch
from educenter.services.schedule import format_time

logger = logging.getLogger(__name__)


def get_student_or_404(db: Session, student_id: str) -> Student:
    student = db.get(Student, student_id)
    if student is None:
        raise ResourceNotFoundError("Student", student_id)
    return student


def _enrolled_groups(db: Session, student_id: str) -> list[Group]:
    return list(
        db.execute(
            select(Group)
            .join(StudentGroup, StudentGroup.group_id == Group.id)
            .where(StudentGroup.student_id == student_id)
            .order_by(StudentGroup.created_at.desc(), Group.id)
        ).scalars()
    )


def student_groups(db: Session, student_id: str) -> list[StudentGroupSummary]:
    get_student_or_404(db, student_id)
    return [
        StudentGroupSummary(
            id=group.id,
            name=group.name,
            status=group.status.value,
            course_name=group.course.name if group.course else None,
            days=list(group.days or []),
            start_time=format_time(group.start_time),
        )
        for group in _enrolled_groups(db, student_id)
    ]


def to_student_out(db: Session, student: Student) -> StudentOut:
    groups = _enrolled_groups(db, student.id)
    return StudentOut.model_validate(student).model_copy(
        update={
            "group_count": len(groups),
            "active_group_count": sum(1 for group in groups if group.status in ACTIVE_GROUP_STATUSES),
        }
    )


def get_student_detail(db: Session, student_id: str) -> StudentDetailOut:
    student = get_student_or_404(db, student_id)
    base = to_student_out(db, student)
    return StudentDetailOut(**base.model_dump(), groups=student_groups(db, student_id))


def create_student(db: Session, payload: StudentCreate) -> StudentOut:
    require_branch(db, payload.branch_id)
    ensure_unique_email(db, Student, payload.email)
    student = Student(**payload.model_dump(exclude={"password"}))
    if payload.password:
        student.hashed_password = get_password_hash(payload.password)
    db.add(student)
    db.commit()
    db.refresh(student)
    logger.info("Created student %s (%s)", student.id, student.fullname)
    return to_student_out(db, student)


def list_students(
    db: Session,
    pagination: Pagination,
    *,
    branch_id: str | None = None,
    group_id: str | None = None,
    status: StudentStatus | None = None,
    gender: Gender | None = None,
    search: str | None = None,
    enrolled: bool | None = None,
) -> Page[StudentOut]:
    clauses = []
    if branch_id:
        clauses.append(Student.branch_id == branch_id)
    if group_id:
        clauses.append(Student.id.in_(select(StudentGroup.student_id).where(StudentGroup.group_id == group_id)))
    if status is not None:
        clauses.append(Student.status == status)
    if gender is not None:
        clauses.append(Student.gender == gender)
    if search:
        pattern = f"%{search.strip()}%"
        clauses.append(
            or_(Student.fullname.ilike(pattern), Student.email.ilike(pattern), Student.phone.ilike(pattern))
        )
    if enrolled is not None:
        active_students = (
            select(StudentGroup.student_id)
            .join(Group, Group.id == StudentGroup.group_id)
            .where(Group.status.in_(ACTIVE_GROUP_STATUSES))
        )
        clauses.append(Student.id.in_(active_students) if enrolled else Student.id.not_in(active_students))

    total = db.execute(select(func.count()).select_from(Student).where(*clauses)).scalar_one()
    students = db.execute(
        select(Student)
        .where(*clauses)
        .order_by(Student.created_at.desc(), Student.id)
        .offset(pagination.offset)
        .limit(pagination.limit)
    ).scalars().all()
    return Page[StudentOut](data=[to_student_out(db, item) for item in students], meta=pagination.meta(total))


def update_student(db: Session, student_id: str, payload: StudentUpdate) -> StudentOut:
    student = get_student_or_404(db, student_id)
    data = payload.model_dump(exclude_unset=True)
    password = data.pop("password", None)
    if data.get("branch_id") and data["branch_id"] != student.branch_id:
        require_branch(db, data["branch_id"])
    if data.get("email"):
        ensure_unique_email(db, Student, data["email"], exclude_id=student_id)
    for key, value in data.items():
        setattr(student, key, value)
    if password:
        student.hashed_password = get_password_hash(password)
    db.commit()
    db.refresh(student)
    logger.info("Updated student %s", student_id)
    return to_student_out(db, student)


def remove_student(db: Session, student_id: str) -> None:
    student = get_student_or_404(db, student_id)
    active = db.execute(
        select(func.count())
        .select_from(StudentGroup)
        .join(Group, Group.id == StudentGroup.group_id)
        .where(StudentGroup.student_id == student_id, Group.status.in_(ACTIVE_GROUP_STATUSES))
    ).scalar_one()
    if active:
        logger.warning("Refused to delete student %s enrolled in %d active group(s)", student_id, active)
        raise ConflictError(
            "Cannot delete student with active group enrollments. Please remove from groups first.",
            details={"activeGroups": active},
        )
    for enrollment in db.execute(select(StudentGroup).where(StudentGroup.student_id == student_id)).scalars():
        db.delete(enrollment)
    db.delete(student)
    db.commit()
    logger.info("Deleted student %s", student_id)


def student_statistics(db: Session, branch_id: str | None = None) -> StudentStatistics:
    scope = [Student.branch_id == branch_id] if branch_id else []

    def count(*clauses) -> int:
        return db.execute(select(func.count()).select_from(Student).where(*scope, *clauses)).scalar_one()

    total = count()
    enrolled = count(Student.id.in_(select(StudentGroup.student_id)))
    enrollment_query = select(func.count()).select_from(StudentGroup)
    if branch_id:
        enrollment_query = enrollment_query.where(StudentGroup.branch_id == branch_id)

    return StudentStatistics(
        total=total,
        by_status=StudentStatusCounts(
            active=count(Student.status == StudentStatus.active),
            inactive=count(Student.status == StudentStatus.inactive),
        ),
        by_gender=StudentGenderCounts(
            male=count(Student.gender == Gender.male),
            female=count(Student.gender == Gender.female),
            unspecified=count(Student.gender.is_(None)),
        ),
        enrollment_stats=StudentEnrollmentStats(
            enrolled=enrolled,
            not_enrolled=total - enrolled,
            total_enrollments=db.execute(enrollment_query).scalar_one(),
        ),
    )
