from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from educenter.api.deps import get_db, get_pagination, require_roles
from educenter.models.user import UserRole
from educenter.schemas.common import MessageOut, Page, Pagination
from educenter.schemas.user import UserCreate, UserOut, UserRoleUpdate, UserUpdate
from educenter.services import user_service
from educenter.services.user_service import Principal

router = APIRouter()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    current: Principal = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> UserOut:
    return user_service.create_user(db, payload)


@router.get("", response_model=Page[UserOut])
def list_users(
    role: UserRole | None = Query(default=None),
    branch_id: str | None = Query(default=None, alias="branchId"),
    pagination: Pagination = Depends(get_pagination),
    current: Principal = Depends(require_roles(UserRole.admin, UserRole.manager)),
    db: Session = Depends(get_db),
) -> Page[UserOut]:
    return user_service.list_users(db, pagination, role=role, branch_id=branch_id)


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: str,
    current: Principal = Depends(require_roles(UserRole.admin, UserRole.manager)),
    db: Session = Depends(get_db),
) -> UserOut:
    return user_service.get_user_or_404(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    payload: UserUpdate,
    current: Principal = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> UserOut:
    return user_service.update_user(db, user_id, payload)


@router.patch("/{user_id}/role", response_model=UserOut)
def change_user_role(
    user_id: str,
    payload: UserRoleUpdate,
    current: Principal = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> UserOut:
    return user_service.change_role(db, user_id, payload.role)


@router.delete("/{user_id}", response_model=MessageOut)
def delete_user(
    user_id: str,
    current: Principal = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> MessageOut:
    user_service.remove_user(db, user_id)
    return MessageOut(message="User deleted successfully")
