"""Lookups shared by the group, course and catalog writers.

Each ``require_*`` helper loads one row and raises the matching
``AppError`` when it cannot be used by a write in ``branch_id``.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from educenter.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from educenter.models.branch import Branch, BranchStatus
from educenter.models.category import CourseCategory
from educenter.models.course import Course, CourseStatus
from educenter.models.room import Room
from educenter.models.teacher import Teacher, TeacherStatus


def require_branch(db: Session, branch_id: str, *, active: bool = True) -> Branch:
    branch = db.get(Branch, branch_id)
    if branch is None:
        raise ResourceNotFoundError("Branch", branch_id)
    if active and branch.status != BranchStatus.active:
        raise ValidationError("Branch is not active", details={"branchId": branch_id})
    return branch


def require_course(db: Session, course_id: str, branch_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    if course.branch_id != branch_id:
        raise ValidationError("Course does not belong to the specified branch", details={"courseId": course_id})
    if course.status != CourseStatus.active:
        raise ValidationError("Course is not active", details={"courseId": course_id})
    return course


def require_category(db: Session, category_id: str, branch_id: str) -> CourseCategory:
    category = db.get(CourseCategory, category_id)
    if category is None:
        raise ResourceNotFoundError("Course category", category_id)
    if category.branch_id != branch_id:
        raise ValidationError(
            "Course category does not belong to the specified branch", details={"categoryId": category_id}
        )
    return category


def require_teacher(db: Session, teacher_id: str, branch_id: str) -> Teacher:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    if teacher.branch_id != branch_id:
        raise ValidationError("Teacher does not belong to the specified branch", details={"teacherId": teacher_id})
    if teacher.status != TeacherStatus.active:
        raise ValidationError("Teacher is not active", details={"teacherId": teacher_id})
    return teacher


def require_room(db: Session, room_id: str, branch_id: str) -> Room:
    room = db.get(Room, room_id)
    if room is None:
        raise ResourceNotFoundError("Room", room_id)
    if room.branch_id != branch_id:
        raise ValidationError("Room does not belong to the specified branch", details={"roomId": room_id})
    return room


def validate_group_dependencies(
    db: Session,
    *,
    course_id: str,
    branch_id: str,
    teacher_id: str | None = None,
    room_id: str | None = None,
) -> None:
    """Run the group dependency checks in a fixed order; the first failure is raised.

    An unknown course, branch, teacher or room is a bad group payload, so it
    surfaces as a ``ValidationError`` rather than a 404.
    """
    try:
        require_course(db, course_id, branch_id)
        require_branch(db, branch_id)
        if teacher_id:
            require_teacher(db, teacher_id, branch_id)
        if room_id:
            require_room(db, room_id, branch_id)
    except ResourceNotFoundError as exc:
        raise ValidationError(exc.message, details=exc.details) from exc


def ensure_unique_email(db: Session, model, email: str | None, *, exclude_id: str | None = None) -> None:
    if not email:
        return
    query = select(func.count()).select_from(model).where(func.lower(model.email) == email.lower())
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    if db.execute(query).scalar_one():
        raise ConflictError("Email already in use", details={"email": email})
