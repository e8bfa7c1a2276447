import logging

from fastapi import APIRouter, Depends, status
from jose import JWTError
from sqlalchemy.orm import Session

from educenter.api.deps import STAFF_ROLES, get_current_principal, get_db, require_roles
from educenter.core.exceptions import AuthenticationError
from educenter.core.security import REFRESH_TOKEN_TYPE, decode_refresh_token
from educenter.models.user import UserRole
from educenter.schemas.student import StudentCreate, StudentOut
from educenter.schemas.teacher import TeacherCreate, TeacherOut
from educenter.schemas.user import PrincipalOut, RefreshRequest, Token, UserCreate, UserLogin, UserOut
from educenter.services import student_service, teacher_service, user_service
from educenter.services.user_service import Principal

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=Token)
def login(payload: UserLogin, db: Session = Depends(get_db)) -> Token:
    principal = user_service.authenticate(db, payload)
    if principal is None:
        logger.warning("Failed login for %s", payload.email or payload.phone)
        raise AuthenticationError("Invalid credentials")
    logger.info("%s %s logged in", principal.kind, principal.id)
    return user_service.issue_tokens(principal)


@router.post("/refresh", response_model=Token)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)) -> Token:
    invalid = AuthenticationError("Invalid refresh token")
    try:
        claims = decode_refresh_token(payload.refresh_token)
    except JWTError as exc:
        raise invalid from exc
    if claims.get("type") != REFRESH_TOKEN_TYPE or not claims.get("sub"):
        raise invalid
    principal = user_service.load_principal(db, claims["sub"])
    if principal is None:
        raise invalid
    return user_service.issue_tokens(principal)


@router.post("/register/user", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register_user(
    payload: UserCreate,
    current: Principal = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> UserOut:
    return user_service.create_user(db, payload)


@router.post("/register/teacher", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def register_teacher(
    payload: TeacherCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> TeacherOut:
    return teacher_service.create_teacher(db, payload)


@router.post("/register/student", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def register_student(
    payload: StudentCreate,
    current: Principal = Depends(require_roles(*STAFF_ROLES)),
    db: Session = Depends(get_db),
) -> StudentOut:
    return student_service.create_student(db, payload)


@router.get("/me", response_model=PrincipalOut)
def me(current: Principal = Depends(get_current_principal)) -> PrincipalOut:
    return current.to_out()
