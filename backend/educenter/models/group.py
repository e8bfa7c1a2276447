import uuid
from datetime import date, datetime, time
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    JSON,
    String,
    Time,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from educenter.db.base import Base
from educenter.models.branch import Branch
from educenter.models.course import Course
from educenter.models.room import Room
from educenter.models.teacher import Teacher


class GroupStatus(str, Enum):
    planned = "PLANNED"
    ongoing = "ONGOING"
    completed = "COMPLETED"


ACTIVE_GROUP_STATUSES = (GroupStatus.planned, GroupStatus.ongoing)


class DayOfWeek(str, Enum):
    mon = "MON"
    tue = "TUE"
    wed = "WED"
    thu = "THU"
    fri = "FRI"
    sat = "SAT"
    sun = "SUN"


class Group(Base):
    __tablename__ = "groups"
    __table_args__ = (UniqueConstraint("branch_id", "name", name="uq_groups_branch_name"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False
    )
    room_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("rooms.id", ondelete="SET NULL"), index=True, nullable=True
    )
    teacher_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("teachers.id", ondelete="SET NULL"), index=True, nullable=True
    )
    branch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("branches.id", ondelete="CASCADE"), index=True, nullable=False
    )
    status: Mapped[GroupStatus] = mapped_column(
        SAEnum(GroupStatus, name="group_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=GroupStatus.planned,
    )
    # Ordered weekday tokens as submitted; GroupScheduleSlot mirrors them for querying.
    days: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    course: Mapped[Course] = relationship(lazy="joined")
    room: Mapped[Room | None] = relationship(lazy="joined")
    teacher: Mapped[Teacher | None] = relationship(lazy="joined")
    branch: Mapped[Branch] = relationship(lazy="joined")
    slots: Mapped[list["GroupScheduleSlot"]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
    )


class GroupScheduleSlot(Base):
    """One row per (group, weekday).

    The partial unique indexes make it impossible for two active groups to
    hold the same teacher or room on the same weekday and start time, even
    when two writers pass the application-level check concurrently.
    """

    __tablename__ = "group_schedule_slots"
    __table_args__ = (
        UniqueConstraint("group_id", "day", name="uq_group_schedule_slots_group_day"),
        Index(
            "uq_group_schedule_slots_teacher_time",
            "teacher_id",
            "day",
            "start_time",
            unique=True,
            postgresql_where=text("is_active AND teacher_id IS NOT NULL AND start_time IS NOT NULL"),
            sqlite_where=text("is_active AND teacher_id IS NOT NULL AND start_time IS NOT NULL"),
        ),
        Index(
            "uq_group_schedule_slots_room_time",
            "room_id",
            "day",
            "start_time",
            unique=True,
            postgresql_where=text("is_active AND room_id IS NOT NULL AND start_time IS NOT NULL"),
            sqlite_where=text("is_active AND room_id IS NOT NULL AND start_time IS NOT NULL"),
        ),
        Index("ix_group_schedule_slots_day", "day"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    group_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("groups.id", ondelete="CASCADE"), index=True, nullable=False
    )
    day: Mapped[str] = mapped_column(String(3), nullable=False)
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    teacher_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    room_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    group: Mapped[Group] = relationship(back_populates="slots")
