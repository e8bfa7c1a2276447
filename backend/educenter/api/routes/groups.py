from datetime import date, time

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from educenter.api.deps import STAFF_ROLES, get_current_principal, get_db, get_pagination, require_roles
from educenter.core.exceptions import ValidationError
from educenter.models.group import GroupStatus
from educenter.schemas.common import MessageOut, Page, Pagination
from educenter.schemas.conflict import ConflictCheckOut, ConflictCheckRequest
from educenter.schemas.group import GroupCreate, GroupDetailOut, GroupOut, GroupStatistics, GroupUpdate
from educenter.services import group_service
from educenter.services.conflict_service import find_schedule_conflicts
from educenter.services.schedule import normalize_days
from educenter.services.user_service import Principal

router = APIRouter()


@router.post("", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: GroupCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> GroupOut:
    return group_service.create_group(db, payload)


@router.get("", response_model=Page[GroupOut])
def list_groups(
    branch_id: str | None = Query(default=None, alias="branchId"),
    course_id: str | None = Query(default=None, alias="courseId"),
    teacher_id: str | None = Query(default=None, alias="teacherId"),
    room_id: str | None = Query(default=None, alias="roomId"),
    group_status: GroupStatus | None = Query(default=None, alias="status"),
    days: list[str] | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
    start_date_from: date | None = Query(default=None, alias="startDateFrom"),
    start_date_to: date | None = Query(default=None, alias="startDateTo"),
    end_date_from: date | None = Query(default=None, alias="endDateFrom"),
    end_date_to: date | None = Query(default=None, alias="endDateTo"),
    start_time_from: time | None = Query(default=None, alias="timeFrom"),
    start_time_to: time | None = Query(default=None, alias="timeTo"),
    pagination: Pagination = Depends(get_pagination),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Page[GroupOut]:
    # Accept both repeated ?days=MON&days=WED and a comma-separated value.
    tokens = [token for value in days or [] for token in value.split(",") if token.strip()]
    try:
        day_filter = tuple(normalize_days(tokens))
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    filters = group_service.GroupFilters(
        branch_id=branch_id,
        course_id=course_id,
        teacher_id=teacher_id,
        room_id=room_id,
        status=group_status,
        days=day_filter,
        search=search,
        start_date_from=start_date_from,
        start_date_to=start_date_to,
        end_date_from=end_date_from,
        end_date_to=end_date_to,
        start_time_from=start_time_from,
        start_time_to=start_time_to,
    )
    return group_service.list_groups(db, filters, pagination)


@router.get("/statistics", response_model=GroupStatistics)
def group_statistics(
    branch_id: str | None = Query(default=None, alias="branchId"),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> GroupStatistics:
    return group_service.group_statistics(db, branch_id)


@router.post("/check-conflicts", response_model=ConflictCheckOut)
def check_conflicts(
    payload: ConflictCheckRequest,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> ConflictCheckOut:
    conflicts = find_schedule_conflicts(
        db,
        days=payload.days,
        start_time=payload.start_time,
        teacher_id=payload.teacher_id,
        room_id=payload.room_id,
        exclude_group_id=payload.exclude_group_id,
    )
    return ConflictCheckOut(has_conflicts=bool(conflicts), conflicts=conflicts)


@router.get("/{group_id}", response_model=GroupDetailOut)
def get_group(
    group_id: str,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> GroupDetailOut:
    return group_service.get_group_detail(db, group_id)


@router.patch("/{group_id}", response_model=GroupOut)
def update_group(
    group_id: str,
    payload: GroupUpdate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> GroupOut:
    return group_service.update_group(db, group_id, payload)


@router.delete("/{group_id}", response_model=MessageOut)
def delete_group(
    group_id: str,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> MessageOut:
    group_service.remove_group(db, group_id)
    return MessageOut(message="Group deleted successfully")
