from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from educenter.api.deps import STAFF_ROLES, get_current_principal, get_db, get_pagination, require_roles
from educenter.models.course import CourseStatus
from educenter.schemas.common import MessageOut, Page, Pagination
from educenter.schemas.course import CourseCreate, CourseOut, CourseStatistics, CourseUpdate
from educenter.services import catalog_service
from educenter.services.user_service import Principal

router = APIRouter()


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> CourseOut:
    return catalog_service.create_course(db, payload)


@router.get("", response_model=Page[CourseOut])
def list_courses(
    branch_id: str | None = Query(default=None, alias="branchId"),
    category_id: str | None = Query(default=None, alias="categoryId"),
    course_status: CourseStatus | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=200),
    min_price: float | None = Query(default=None, alias="minPrice", ge=0),
    max_price: float | None = Query(default=None, alias="maxPrice", ge=0),
    min_duration: int | None = Query(default=None, alias="minDuration", ge=0),
    max_duration: int | None = Query(default=None, alias="maxDuration", ge=0),
    pagination: Pagination = Depends(get_pagination),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Page[CourseOut]:
    return catalog_service.list_courses(
        db,
        pagination,
        branch_id=branch_id,
        category_id=category_id,
        status=course_status,
        search=search,
        min_price=min_price,
        max_price=max_price,
        min_duration=min_duration,
        max_duration=max_duration,
    )


@router.get("/statistics", response_model=CourseStatistics)
def course_statistics(
    branch_id: str | None = Query(default=None, alias="branchId"),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> CourseStatistics:
    return catalog_service.course_statistics(db, branch_id)


@router.get("/{course_id}", response_model=CourseOut)
def get_course(
    course_id: str,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> CourseOut:
    return catalog_service.get_course_or_404(db, course_id)


@router.patch("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: str,
    payload: CourseUpdate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> CourseOut:
    return catalog_service.update_course(db, course_id, payload)


@router.delete("/{course_id}", response_model=MessageOut)
def delete_course(
    course_id: str,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> MessageOut:
    catalog_service.remove_course(db, course_id)
    return MessageOut(message="Course deleted successfully")
