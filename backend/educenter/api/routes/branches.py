from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from educenter.api.deps import STAFF_ROLES, get_current_principal, get_db, get_pagination, require_roles
from educenter.models.branch import BranchStatus
from educenter.models.user import UserRole
from educenter.schemas.branch import BranchCreate, BranchOut, BranchUpdate
from educenter.schemas.common import MessageOut, Page, Pagination
from educenter.services import catalog_service
from educenter.services.user_service import Principal

router = APIRouter()


@router.post("", response_model=BranchOut, status_code=status.HTTP_201_CREATED)
def create_branch(
    payload: BranchCreate,
    current: Principal = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> BranchOut:
    return catalog_service.create_branch(db, payload)


@router.get("", response_model=Page[BranchOut])
def list_branches(
    search: str | None = Query(default=None, max_length=200),
    branch_status: BranchStatus | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Page[BranchOut]:
    return catalog_service.list_branches(db, pagination, search=search, status=branch_status)


@router.get("/{branch_id}", response_model=BranchOut)
def get_branch(
    branch_id: str,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> BranchOut:
    return catalog_service.get_branch_or_404(db, branch_id)


@router.patch("/{branch_id}", response_model=BranchOut)
def update_branch(
    branch_id: str,
    payload: BranchUpdate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> BranchOut:
    return catalog_service.update_branch(db, branch_id, payload)


@router.delete("/{branch_id}", response_model=MessageOut)
def delete_branch(
    branch_id: str,
    current: Principal = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> MessageOut:
    catalog_service.remove_branch(db, branch_id)
    return MessageOut(message="Branch deleted successfully")
