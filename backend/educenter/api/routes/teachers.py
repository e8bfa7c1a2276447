from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from educenter.api.deps import STAFF_ROLES, get_current_principal, get_db, get_pagination, require_roles
from educenter.models.teacher import Gender, TeacherStatus
from educenter.schemas.common import MessageOut, Page, Pagination
from educenter.schemas.teacher import (
    TeacherCreate,
    TeacherGroupSummary,
    TeacherOut,
    TeacherStats,
    TeacherStatusUpdate,
    TeacherUpdate,
)
from educenter.services import teacher_service
from educenter.services.user_service import Principal

router = APIRouter()


@router.post("", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> TeacherOut:
    return teacher_service.create_teacher(db, payload)


@router.get("", response_model=Page[TeacherOut])
def list_teachers(
    branch_id: str | None = Query(default=None, alias="branchId"),
    teacher_status: TeacherStatus | None = Query(default=None, alias="status"),
    gender: Gender | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
    pagination: Pagination = Depends(get_pagination),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Page[TeacherOut]:
    return teacher_service.list_teachers(
        db, pagination, branch_id=branch_id, status=teacher_status, gender=gender, search=search
    )


@router.get("/stats", response_model=TeacherStats)
def teacher_stats(
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> TeacherStats:
    return teacher_service.teacher_stats(db)


@router.get("/{teacher_id}", response_model=TeacherOut)
def get_teacher(
    teacher_id: str,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> TeacherOut:
    teacher = teacher_service.get_teacher_or_404(db, teacher_id)
    return teacher_service.to_teacher_out(db, teacher, with_groups=True)


@router.get("/{teacher_id}/groups", response_model=list[TeacherGroupSummary])
def get_teacher_groups(
    teacher_id: str,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> list[TeacherGroupSummary]:
    teacher_service.get_teacher_or_404(db, teacher_id)
    return teacher_service.teacher_groups(db, teacher_id)


@router.patch("/{teacher_id}", response_model=TeacherOut)
def update_teacher(
    teacher_id: str,
    payload: TeacherUpdate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> TeacherOut:
    return teacher_service.update_teacher(db, teacher_id, payload)


@router.patch("/{teacher_id}/status", response_model=TeacherOut)
def update_teacher_status(
    teacher_id: str,
    payload: TeacherStatusUpdate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> TeacherOut:
    return teacher_service.update_teacher_status(db, teacher_id, payload.status)


@router.delete("/{teacher_id}", response_model=MessageOut)
def delete_teacher(
    teacher_id: str,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> MessageOut:
    fullname = teacher_service.remove_teacher(db, teacher_id)
    return MessageOut(message=f"Teacher {fullname} has been successfully deleted")
