from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from educenter.api.deps import STAFF_ROLES, get_current_principal, get_db, require_roles
from educenter.schemas.category import CategoryCreate, CategoryOut, CategoryUpdate
from educenter.schemas.common import MessageOut
from educenter.services import catalog_service
from educenter.services.user_service import Principal

router = APIRouter()


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> CategoryOut:
    return catalog_service.create_category(db, payload)


@router.get("", response_model=list[CategoryOut])
def list_categories(
    branch_id: str | None = Query(default=None, alias="branchId"),
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> list[CategoryOut]:
    return catalog_service.list_categories(db, branch_id=branch_id)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: str,
    current: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> CategoryOut:
    category = catalog_service.get_category_or_404(db, category_id)
    return catalog_service.to_category_out(db, category)


@router.patch("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> CategoryOut:
    return catalog_service.update_category(db, category_id, payload)


@router.delete("/{category_id}", response_model=MessageOut)
def delete_category(
    category_id: str,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> MessageOut:
    catalog_service.remove_category(db, category_id)
    return MessageOut(message="Course category deleted successfully")
