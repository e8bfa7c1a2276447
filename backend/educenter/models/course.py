import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from educenter.db.base import Base
from educenter.models.branch import Branch
from educenter.models.category import CourseCategory


class CourseStatus(str, Enum):
    active = "ACTIVE"
    draft = "DRAFT"
    archived = "ARCHIVED"


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    branch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("branches.id", ondelete="CASCADE"), index=True, nullable=False
    )
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("course_categories.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[CourseStatus] = mapped_column(
        SAEnum(CourseStatus, name="course_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CourseStatus.active,
    )
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    duration_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    category: Mapped[CourseCategory] = relationship(lazy="joined")
    branch: Mapped[Branch] = relationship(lazy="joined")
