"""Branches, course categories and courses."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from educenter.core.exceptions import ConflictError, ResourceNotFoundError
from educenter.models.branch import Branch, BranchStatus
from educenter.models.category import CourseCategory
from educenter.models.course import Course, CourseStatus
from educenter.models.group import Group
from educenter.schemas.branch import BranchCreate, BranchOut, BranchUpdate
from educenter.schemas.category import CategoryCreate, CategoryOut, CategoryUpdate
from educenter.schemas.common import Page, Pagination
from educenter.schemas.course import CourseCreate, CourseOut, CourseStatistics, CourseStatusCounts, CourseUpdate
from educenter.services.resources import require_branch, require_category

logger = logging.getLogger(__name__)


def _count(db: Session, model, *clauses) -> int:
    return db.execute(select(func.count()).select_from(model).where(*clauses)).scalar_one()


# Branches


def get_branch_or_404(db: Session, branch_id: str) -> Branch:
    branch = db.get(Branch, branch_id)
    if branch is None:
        raise ResourceNotFoundError("Branch", branch_id)
    return branch


def create_branch(db: Session, payload: BranchCreate) -> Branch:
    branch = Branch(**payload.model_dump())
    db.add(branch)
    db.commit()
    db.refresh(branch)
    logger.info("Created branch %s (%s)", branch.id, branch.name)
    return branch


def list_branches(
    db: Session,
    pagination: Pagination,
    *,
    search: str | None = None,
    status: BranchStatus | None = None,
) -> Page[BranchOut]:
    clauses = []
    if search:
        pattern = f"%{search.strip()}%"
        clauses.append(or_(Branch.name.ilike(pattern), Branch.region.ilike(pattern), Branch.district.ilike(pattern)))
    if status is not None:
        clauses.append(Branch.status == status)
    total = _count(db, Branch, *clauses)
    branches = db.execute(
        select(Branch).where(*clauses).order_by(Branch.name, Branch.id).offset(pagination.offset).limit(pagination.limit)
    ).scalars().all()
    return Page[BranchOut](data=[BranchOut.model_validate(item) for item in branches], meta=pagination.meta(total))


def update_branch(db: Session, branch_id: str, payload: BranchUpdate) -> Branch:
    branch = get_branch_or_404(db, branch_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(branch, key, value)
    db.commit()
    db.refresh(branch)
    logger.info("Updated branch %s", branch_id)
    return branch


def remove_branch(db: Session, branch_id: str) -> None:
    branch = get_branch_or_404(db, branch_id)
    groups = _count(db, Group, Group.branch_id == branch_id)
    courses = _count(db, Course, Course.branch_id == branch_id)
    if groups or courses:
        raise ConflictError(
            "Cannot delete branch with existing courses or groups",
            details={"courses": courses, "groups": groups},
        )
    db.delete(branch)
    db.commit()
    logger.info("Deleted branch %s", branch_id)


# Course categories


def get_category_or_404(db: Session, category_id: str) -> CourseCategory:
    category = db.get(CourseCategory, category_id)
    if category is None:
        raise ResourceNotFoundError("Course category", category_id)
    return category


def to_category_out(db: Session, category: CourseCategory) -> CategoryOut:
    return CategoryOut.model_validate(category).model_copy(
        update={"course_count": _count(db, Course, Course.category_id == category.id)}
    )


def create_category(db: Session, payload: CategoryCreate) -> CategoryOut:
    require_branch(db, payload.branch_id, active=False)
    category = CourseCategory(**payload.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Created course category %s (%s)", category.id, category.name)
    return to_category_out(db, category)


def list_categories(db: Session, *, branch_id: str | None = None) -> list[CategoryOut]:
    query = select(CourseCategory).order_by(CourseCategory.name, CourseCategory.id)
    if branch_id:
        query = query.where(CourseCategory.branch_id == branch_id)
    return [to_category_out(db, item) for item in db.execute(query).scalars()]


def update_category(db: Session, category_id: str, payload: CategoryUpdate) -> CategoryOut:
    category = get_category_or_404(db, category_id)
    data = payload.model_dump(exclude_unset=True)
    if "branch_id" in data:
        require_branch(db, data["branch_id"], active=False)
    for key, value in data.items():
        setattr(category, key, value)
    db.commit()
    db.refresh(category)
    return to_category_out(db, category)


def remove_category(db: Session, category_id: str) -> None:
    category = get_category_or_404(db, category_id)
    courses = _count(db, Course, Course.category_id == category_id)
    if courses:
        raise ConflictError("Cannot delete category that has courses", details={"courses": courses})
    db.delete(category)
    db.commit()
    logger.info("Deleted course category %s", category_id)


# Courses


def get_course_or_404(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    return course


def create_course(db: Session, payload: CourseCreate) -> Course:
    require_branch(db, payload.branch_id)
    require_category(db, payload.category_id, payload.branch_id)
    course = Course(**payload.model_dump())
    db.add(course)
    db.commit()
    db.refresh(course)
    logger.info("Created course %s (%s)", course.id, course.name)
    return course


def list_courses(
    db: Session,
    pagination: Pagination,
    *,
    branch_id: str | None = None,
    category_id: str | None = None,
    status: CourseStatus | None = None,
    search: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    min_duration: int | None = None,
    max_duration: int | None = None,
) -> Page[CourseOut]:
    clauses = []
    if branch_id:
        clauses.append(Course.branch_id == branch_id)
    if category_id:
        clauses.append(Course.category_id == category_id)
    if status is not None:
        clauses.append(Course.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        clauses.append(or_(Course.name.ilike(pattern), Course.description.ilike(pattern)))
    if min_price is not None:
        clauses.append(Course.price >= min_price)
    if max_price is not None:
        clauses.append(Course.price <= max_price)
    if min_duration is not None:
        clauses.append(Course.duration_months >= min_duration)
    if max_duration is not None:
        clauses.append(Course.duration_months <= max_duration)

    total = _count(db, Course, *clauses)
    courses = db.execute(
        select(Course)
        .where(*clauses)
        .order_by(Course.created_at.desc(), Course.id)
        .offset(pagination.offset)
        .limit(pagination.limit)
    ).scalars().all()
    return Page[CourseOut](data=[CourseOut.model_validate(item) for item in courses], meta=pagination.meta(total))


def update_course(db: Session, course_id: str, payload: CourseUpdate) -> Course:
    course = get_course_or_404(db, course_id)
    data = payload.model_dump(exclude_unset=True)
    branch_id = data.get("branch_id", course.branch_id)
    category_id = data.get("category_id", course.category_id)
    if "branch_id" in data:
        require_branch(db, branch_id)
    if {"branch_id", "category_id"} & data.keys():
        require_category(db, category_id, branch_id)
    for key, value in data.items():
        setattr(course, key, value)
    db.commit()
    db.refresh(course)
    logger.info("Updated course %s", course_id)
    return course


def remove_course(db: Session, course_id: str) -> None:
    course = get_course_or_404(db, course_id)
    groups = _count(db, Group, Group.course_id == course_id)
    if groups:
        logger.warning("Refused to delete course %s referenced by %d group(s)", course_id, groups)
        raise ConflictError("Cannot delete course with existing groups", details={"groups": groups})
    db.delete(course)
    db.commit()
    logger.info("Deleted course %s", course_id)


def course_statistics(db: Session, branch_id: str | None = None) -> CourseStatistics:
    scope = [Course.branch_id == branch_id] if branch_id else []
    rows = db.execute(select(Course.status, func.count()).where(*scope).group_by(Course.status)).all()
    by_status = {status: count for status, count in rows}
    average_price = db.execute(select(func.coalesce(func.avg(Course.price), 0)).where(*scope)).scalar_one()
    return CourseStatistics(
        total=sum(by_status.values()),
        by_status=CourseStatusCounts(
            active=by_status.get(CourseStatus.active, 0),
            draft=by_status.get(CourseStatus.draft, 0),
            archived=by_status.get(CourseStatus.archived, 0),
        ),
        average_price=round(float(average_price), 2),
    )
