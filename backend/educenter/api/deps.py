from collections.abc import Callable, Generator, Iterable

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from educenter.core.exceptions import AuthenticationError, ForbiddenError
from educenter.core.security import ACCESS_TOKEN_TYPE, decode_token
from educenter.db.session import SessionLocal
from educenter.models.user import UserRole
from educenter.schemas.common import Pagination
from educenter.services.user_service import Principal, load_principal

security = HTTPBearer(auto_error=False)

STAFF_ROLES = (UserRole.admin, UserRole.manager)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> Principal:
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    token = credentials.credentials
    credentials_exception = AuthenticationError()
    try:
        payload = decode_token(token)
        subject = payload.get("sub")
        if subject is None or payload.get("type") != ACCESS_TOKEN_TYPE:
            raise credentials_exception
    except JWTError as exc:
        raise credentials_exception from exc

    principal = load_principal(db, subject)
    if principal is None:
        raise credentials_exception
    return principal


def require_roles(*roles: UserRole) -> Callable[[Principal], Principal]:
    allowed_roles: Iterable[UserRole] = set(roles)

    def role_checker(current: Principal = Depends(get_current_principal)) -> Principal:
        if current.role not in allowed_roles:
            raise ForbiddenError()
        return current

    return role_checker


def get_pagination(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> Pagination:
    return Pagination(page=page, limit=limit)
