import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from educenter.api.deps import STAFF_ROLES, get_current_principal, get_db, get_pagination, require_roles
from educenter.core.exceptions import ConflictError
from educenter.models.room import Room
from educenter.schemas.common import MessageOut, Page, Pagination
from educenter.schemas.room import (
    RoomAvailabilityOut,
    RoomAvailabilityRequest,
    RoomCreate,
    RoomDetailOut,
    RoomOut,
    RoomStatistics,
    RoomUpdate,
)
from educenter.services import room_service
from educenter.services.resources import require_branch
from educenter.services.user_service import Principal

router = APIRouter()
logger = logging.getLogger(__name__)


def _ensure_unique_name(db: Session, branch_id: str, name: str, *, exclude_id: str | None = None) -> None:
    query = select(Room).where(Room.branch_id == branch_id, Room.name == name)
    if exclude_id is not None:
        query = query.where(Room.id != exclude_id)
    if db.execute(query).scalars().first() is not None:
        raise ConflictError(f'Room with name "{name}" already exists in this branch')


@router.post("", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> RoomOut:
    require_branch(db, payload.branch_id)
    _ensure_unique_name(db, payload.branch_id, payload.name)
    room = Room(**payload.model_dump())
    db.add(room)
    db.commit()
    db.refresh(room)
    logger.info("Created room %s (%s)", room.id, room.name)
    return room_service.to_room_out(db, room)


@router.get("", response_model=Page[RoomOut])
def list_rooms(
    branch_id: str | None = Query(default=None, alias="branchId"),
    search: str | None = Query(default=None, max_length=100),
    min_capacity: int | None = Query(default=None, alias="minCapacity", ge=1),
    max_capacity: int | None = Query(default=None, alias="maxCapacity", ge=1),
    available: bool | None = Query(default=None),
    sort_by: Literal["name", "capacity", "created"] = Query(default="name", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="asc", alias="sortOrder"),
    pagination: Pagination = Depends(get_pagination),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Page[RoomOut]:
    return room_service.list_rooms(
        db,
        pagination,
        branch_id=branch_id,
        search=search,
        min_capacity=min_capacity,
        max_capacity=max_capacity,
        available=available,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/statistics", response_model=RoomStatistics)
def room_statistics(
    branch_id: str | None = Query(default=None, alias="branchId"),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> RoomStatistics:
    return room_service.room_statistics(db, branch_id)


@router.post("/check-availability", response_model=RoomAvailabilityOut)
def check_availability(
    payload: RoomAvailabilityRequest,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> RoomAvailabilityOut:
    return room_service.check_availability(
        db, payload.room_id, payload.days, payload.start_time, payload.exclude_group_id
    )


@router.get("/{room_id}", response_model=RoomDetailOut)
def get_room(
    room_id: str,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> RoomDetailOut:
    return room_service.get_room_detail(db, room_id)


@router.patch("/{room_id}", response_model=RoomOut)
def update_room(
    room_id: str,
    payload: RoomUpdate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> RoomOut:
    room = room_service.get_room_or_404(db, room_id)
    data = payload.model_dump(exclude_unset=True)
    branch_id = data.get("branch_id", room.branch_id)
    if "branch_id" in data and branch_id != room.branch_id:
        require_branch(db, branch_id)
    if "name" in data or "branch_id" in data:
        _ensure_unique_name(db, branch_id, data.get("name", room.name), exclude_id=room_id)

    for key, value in data.items():
        setattr(room, key, value)
    db.commit()
    db.refresh(room)
    logger.info("Updated room %s", room_id)
    return room_service.to_room_out(db, room)


@router.delete("/{room_id}", response_model=MessageOut)
def delete_room(
    room_id: str,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> MessageOut:
    room_service.remove_room(db, room_id)
    return MessageOut(message="Room deleted successfully")
