from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from educenter.api.deps import STAFF_ROLES, get_current_principal, get_db, get_pagination, require_roles
from educenter.schemas.common import Page, Pagination
from educenter.schemas.enrollment import EnrollmentCreate, EnrollmentOut
from educenter.services import enrollment_service
from educenter.services.user_service import Principal

router = APIRouter()


@router.get("", response_model=Page[EnrollmentOut])
def list_enrollments(
    branch_id: str | None = Query(default=None, alias="branchId"),
    group_id: str | None = Query(default=None, alias="groupId"),
    student_id: str | None = Query(default=None, alias="studentId"),
    pagination: Pagination = Depends(get_pagination),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Page[EnrollmentOut]:
    return enrollment_service.list_enrollments(
        db, pagination, branch_id=branch_id, group_id=group_id, student_id=student_id
    )


@router.post("", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def create_enrollment(
    payload: EnrollmentCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> EnrollmentOut:
    return enrollment_service.enroll_student(db, payload)
