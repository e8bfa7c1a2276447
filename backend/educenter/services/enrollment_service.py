import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from educenter.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from educenter.models.enrollment import StudentGroup
from educenter.models.group import Group
from educenter.models.student import Student
from educenter.schemas.common import Page, Pagination
from educenter.schemas.enrollment import EnrollmentCreate, EnrollmentOut

logger = logging.getLogger(__name__)

DUPLICATE_ENROLLMENT = "Student is already enrolled in this group"


def to_enrollment_out(enrollment: StudentGroup) -> EnrollmentOut:
    return EnrollmentOut.model_validate(enrollment).model_copy(
        update={"student_name": enrollment.student.fullname, "group_name": enrollment.group.name}
    )


def enroll_student(db: Session, payload: EnrollmentCreate) -> EnrollmentOut:
    student = db.get(Student, payload.student_id)
    if student is None:
        raise ResourceNotFoundError("Student", payload.student_id)
    group = db.get(Group, payload.group_id)
    if group is None:
        raise ResourceNotFoundError("Group", payload.group_id)
    if group.branch_id != payload.branch_id or student.branch_id != payload.branch_id:
        raise ValidationError("Student and group must belong to the same branch")

    existing = db.execute(
        select(StudentGroup).where(
            StudentGroup.group_id == payload.group_id, StudentGroup.student_id == payload.student_id
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise ConflictError(DUPLICATE_ENROLLMENT)

    enrollment = StudentGroup(**payload.model_dump())
    db.add(enrollment)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(DUPLICATE_ENROLLMENT) from exc
    db.refresh(enrollment)
    logger.info("Enrolled student %s in group %s", student.id, group.id)
    return to_enrollment_out(enrollment)


def unenroll_student(db: Session, group_id: str, student_id: str) -> None:
    enrollment = db.execute(
        select(StudentGroup).where(StudentGroup.group_id == group_id, StudentGroup.student_id == student_id)
    ).scalar_one_or_none()
    if enrollment is None:
        raise ResourceNotFoundError(
            "Enrollment", message=f"Student {student_id} is not enrolled in group {group_id}"
        )
    db.delete(enrollment)
    db.commit()
    logger.info("Removed student %s from group %s", student_id, group_id)


def list_enrollments(
    db: Session,
    pagination: Pagination,
    *,
    branch_id: str | None = None,
    group_id: str | None = None,
    student_id: str | None = None,
) -> Page[EnrollmentOut]:
    clauses = []
    if branch_id:
        clauses.append(StudentGroup.branch_id == branch_id)
    if group_id:
        clauses.append(StudentGroup.group_id == group_id)
    if student_id:
        clauses.append(StudentGroup.student_id == student_id)
    total = db.execute(select(func.count()).select_from(StudentGroup).where(*clauses)).scalar_one()
    rows = db.execute(
        select(StudentGroup)
        .where(*clauses)
        .order_by(StudentGroup.created_at.desc(), StudentGroup.id)
        .offset(pagination.offset)
        .limit(pagination.limit)
    ).scalars().all()
    return Page[EnrollmentOut](data=[to_enrollment_out(row) for row in rows], meta=pagination.meta(total))
