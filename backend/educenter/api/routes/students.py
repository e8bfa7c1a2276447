from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from educenter.api.deps import STAFF_ROLES, get_current_principal, get_db, get_pagination, require_roles
from educenter.models.student import StudentStatus
from educenter.models.teacher import Gender
from educenter.schemas.common import MessageOut, Page, Pagination
from educenter.schemas.enrollment import EnrollmentCreate, EnrollmentOut
from educenter.schemas.student import (
    StudentCreate,
    StudentDetailOut,
    StudentGroupSummary,
    StudentOut,
    StudentStatistics,
    StudentUpdate,
)
from educenter.services import enrollment_service, student_service
from educenter.services.user_service import Principal

router = APIRouter()


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> StudentOut:
    return student_service.create_student(db, payload)


@router.get("", response_model=Page[StudentOut])
def list_students(
    branch_id: str | None = Query(default=None, alias="branchId"),
    group_id: str | None = Query(default=None, alias="groupId"),
    student_status: StudentStatus | None = Query(default=None, alias="status"),
    gender: Gender | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
    enrolled: bool | None = Query(default=None),
    pagination: Pagination = Depends(get_pagination),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Page[StudentOut]:
    return student_service.list_students(
        db,
        pagination,
        branch_id=branch_id,
        group_id=group_id,
        status=student_status,
        gender=gender,
        search=search,
        enrolled=enrolled,
    )


@router.get("/statistics", response_model=StudentStatistics)
def student_statistics(
    branch_id: str | None = Query(default=None, alias="branchId"),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> StudentStatistics:
    return student_service.student_statistics(db, branch_id)


@router.post("/enroll", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def enroll_student(
    payload: EnrollmentCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> EnrollmentOut:
    return enrollment_service.enroll_student(db, payload)


@router.get("/{student_id}", response_model=StudentDetailOut)
def get_student(
    student_id: str,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> StudentDetailOut:
    return student_service.get_student_detail(db, student_id)


@router.get("/{student_id}/groups", response_model=list[StudentGroupSummary])
def get_student_groups(
    student_id: str,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> list[StudentGroupSummary]:
    return student_service.student_groups(db, student_id)


@router.patch("/{student_id}", response_model=StudentOut)
def update_student(
    student_id: str,
    payload: StudentUpdate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> StudentOut:
    return student_service.update_student(db, student_id, payload)


@router.delete("/{student_id}/groups/{group_id}", response_model=MessageOut)
def unenroll_student(
    student_id: str,
    group_id: str,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> MessageOut:
    enrollment_service.unenroll_student(db, group_id, student_id)
    return MessageOut(message="Student removed from group successfully")


@router.delete("/{student_id}", response_model=MessageOut)
def delete_student(
    student_id: str,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> MessageOut:
    student_service.remove_student(db, student_id)
    return MessageOut(message="Student deleted successfully")
