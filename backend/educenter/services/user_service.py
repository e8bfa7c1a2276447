"""Staff accounts and login across users, teachers and students."""

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from educenter.core.exceptions import ForbiddenError, ResourceNotFoundError
from educenter.core.security import create_access_token, create_refresh_token, get_password_hash, verify_password
from educenter.models.student import Student, StudentStatus
from educenter.models.teacher import Teacher, TeacherStatus
from educenter.models.user import User, UserRole
from educenter.schemas.common import Page, Pagination
from educenter.schemas.user import PrincipalOut, Token, UserCreate, UserLogin, UserOut, UserUpdate
from educenter.services.resources import ensure_unique_email, require_branch

logger = logging.getLogger(__name__)

PRINCIPAL_KINDS = ("user", "teacher", "student")


@dataclass(frozen=True)
class Principal:
    """Authenticated caller. ``kind`` says which table ``id`` refers to."""

    kind: str
    id: str
    role: UserRole
    name: str
    email: str | None = None
    phone: str | None = None
    branch_id: str | None = None

    @property
    def subject(self) -> str:
        return f"{self.kind}:{self.id}"

    def to_out(self) -> PrincipalOut:
        return PrincipalOut(
            id=self.id,
            kind=self.kind,
            name=self.name,
            email=self.email,
            phone=self.phone,
            role=self.role,
            branch_id=self.branch_id,
        )


def principal_from_user(user: User) -> Principal:
    return Principal("user", user.id, user.role, user.name, user.email, user.phone, user.branch_id)


def principal_from_teacher(teacher: Teacher) -> Principal:
    return Principal(
        "teacher", teacher.id, UserRole.teacher, teacher.fullname, teacher.email, teacher.phone, teacher.branch_id
    )


def principal_from_student(student: Student) -> Principal:
    return Principal(
        "student", student.id, UserRole.student, student.fullname, student.email, student.phone, student.branch_id
    )


def load_principal(db: Session, subject: str) -> Principal | None:
    """Resolve a ``<kind>:<id>`` token subject to an active principal."""
    kind, _, identifier = subject.partition(":")
    if kind not in PRINCIPAL_KINDS or not identifier:
        return None
    if kind == "user":
        user = db.get(User, identifier)
        return principal_from_user(user) if user is not None and user.is_active else None
    if kind == "teacher":
        teacher = db.get(Teacher, identifier)
        if teacher is None or teacher.status != TeacherStatus.active:
            return None
        return principal_from_teacher(teacher)
    student = db.get(Student, identifier)
    if student is None or student.status != StudentStatus.active:
        return None
    return principal_from_student(student)


def issue_tokens(principal: Principal) -> Token:
    return Token(
        access_token=create_access_token(principal.subject, principal.role.value),
        refresh_token=create_refresh_token(principal.subject, principal.role.value),
        user=principal.to_out(),
    )


def _matches(model, credentials: UserLogin):
    if credentials.email:
        return func.lower(model.email) == credentials.email
    return model.phone == credentials.phone


def authenticate(db: Session, credentials: UserLogin) -> Principal | None:
    """Look the identifier up in users, then teachers, then students."""
    user = db.execute(select(User).where(_matches(User, credentials))).scalars().first()
    if user is not None and user.is_active and verify_password(credentials.password, user.hashed_password):
        return principal_from_user(user)

    teacher = db.execute(select(Teacher).where(_matches(Teacher, credentials))).scalars().first()
    if (
        teacher is not None
        and teacher.status == TeacherStatus.active
        and verify_password(credentials.password, teacher.hashed_password)
    ):
        return principal_from_teacher(teacher)

    student = db.execute(select(Student).where(_matches(Student, credentials))).scalars().first()
    if (
        student is not None
        and student.status == StudentStatus.active
        and verify_password(credentials.password, student.hashed_password)
    ):
        return principal_from_student(student)
    return None


def get_user_or_404(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return user


def create_user(db: Session, payload: UserCreate) -> User:
    ensure_unique_email(db, User, payload.email)
    if payload.branch_id:
        require_branch(db, payload.branch_id, active=False)
    user = User(**payload.model_dump(exclude={"password"}), hashed_password=get_password_hash(payload.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created %s account %s", user.role.value, user.email)
    return user


def list_users(
    db: Session,
    pagination: Pagination,
    *,
    role: UserRole | None = None,
    branch_id: str | None = None,
) -> Page[UserOut]:
    clauses = []
    if role is not None:
        clauses.append(User.role == role)
    if branch_id:
        clauses.append(User.branch_id == branch_id)
    total = db.execute(select(func.count()).select_from(User).where(*clauses)).scalar_one()
    users = db.execute(
        select(User)
        .where(*clauses)
        .order_by(User.created_at.desc(), User.id)
        .offset(pagination.offset)
        .limit(pagination.limit)
    ).scalars().all()
    return Page[UserOut](data=[UserOut.model_validate(item) for item in users], meta=pagination.meta(total))


def _admin_count(db: Session) -> int:
    return db.execute(select(func.count()).select_from(User).where(User.role == UserRole.admin)).scalar_one()


def _guard_last_admin(db: Session, user: User, action: str) -> None:
    if user.role == UserRole.admin and _admin_count(db) <= 1:
        logger.warning("Refused to %s the last administrator %s", action, user.id)
        raise ForbiddenError(f"Cannot {action} the last administrator")


def update_user(db: Session, user_id: str, payload: UserUpdate) -> User:
    user = get_user_or_404(db, user_id)
    data = payload.model_dump(exclude_unset=True)
    password = data.pop("password", None)
    if data.get("email"):
        ensure_unique_email(db, User, data["email"], exclude_id=user_id)
    if data.get("branch_id"):
        require_branch(db, data["branch_id"], active=False)
    if data.get("is_active") is False:
        _guard_last_admin(db, user, "deactivate")
    for key, value in data.items():
        setattr(user, key, value)
    if password:
        user.hashed_password = get_password_hash(password)
    db.commit()
    db.refresh(user)
    logger.info("Updated user %s", user_id)
    return user


def change_role(db: Session, user_id: str, role: UserRole) -> User:
    user = get_user_or_404(db, user_id)
    if role != UserRole.admin:
        _guard_last_admin(db, user, "demote")
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("User %s role set to %s", user_id, role.value)
    return user


def remove_user(db: Session, user_id: str) -> None:
    user = get_user_or_404(db, user_id)
    _guard_last_admin(db, user, "delete")
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)
