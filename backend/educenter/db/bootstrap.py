from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from educenter import models  # noqa: F401
from educenter.core.config import Settings, get_settings
from educenter.core.security import get_password_hash
from educenter.db.base import Base
from educenter.db.session import SessionLocal, engine
from educenter.models.user import User, UserRole

logger = logging.getLogger(__name__)


def create_schema() -> None:
    Base.metadata.create_all(bind=engine)


def ensure_seed_admin(db: Session, settings: Settings) -> User | None:
    """Create the configured administrator once; later runs leave the account untouched."""
    if not settings.seed_admin_email or not settings.seed_admin_password:
        return None
    email = settings.seed_admin_email.strip().lower()
    existing = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if existing is not None:
        return existing
    admin = User(
        name=settings.seed_admin_name,
        email=email,
        hashed_password=get_password_hash(settings.seed_admin_password),
        role=UserRole.admin,
    )
    db.add(admin)
    db.commit()
    logger.info("Seeded administrator account %s", email)
    return admin


def bootstrap() -> None:
    settings = get_settings()
    create_schema()
    with SessionLocal() as db:
        ensure_seed_admin(db, settings)
