"""create groups, schedule slots and enrollments

Revision ID: 20261017_0002
Revises: 20261017_0001
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261017_0002"
down_revision = "20261017_0001"
branch_labels = None
depends_on = None


group_status_enum = sa.Enum("PLANNED", "ONGOING", "COMPLETED", name="group_status")

TEACHER_SLOT_PREDICATE = "is_active AND teacher_id IS NOT NULL AND start_time IS NOT NULL"
ROOM_SLOT_PREDICATE = "is_active AND room_id IS NOT NULL AND start_time IS NOT NULL"


def upgrade() -> None:
    op.create_table(
        "groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("course_id", sa.String(length=36), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("room_id", sa.String(length=36), sa.ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", group_status_enum, nullable=False, server_default="PLANNED"),
        sa.Column("days", sa.JSON(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("branch_id", "name", name="uq_groups_branch_name"),
    )
    for column in ("course_id", "room_id", "teacher_id", "branch_id"):
        op.create_index(f"ix_groups_{column}", "groups", [column])

    op.create_table(
        "group_schedule_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("group_id", sa.String(length=36), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day", sa.String(length=3), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("teacher_id", sa.String(length=36), nullable=True),
        sa.Column("room_id", sa.String(length=36), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.UniqueConstraint("group_id", "day", name="uq_group_schedule_slots_group_day"),
    )
    op.create_index("ix_group_schedule_slots_group_id", "group_schedule_slots", ["group_id"])
    op.create_index("ix_group_schedule_slots_day", "group_schedule_slots", ["day"])
    op.create_index(
        "uq_group_schedule_slots_teacher_time",
        "group_schedule_slots",
        ["teacher_id", "day", "start_time"],
        unique=True,
        postgresql_where=sa.text(TEACHER_SLOT_PREDICATE),
        sqlite_where=sa.text(TEACHER_SLOT_PREDICATE),
    )
    op.create_index(
        "uq_group_schedule_slots_room_time",
        "group_schedule_slots",
        ["room_id", "day", "start_time"],
        unique=True,
        postgresql_where=sa.text(ROOM_SLOT_PREDICATE),
        sqlite_where=sa.text(ROOM_SLOT_PREDICATE),
    )

    op.create_table(
        "student_groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("group_id", sa.String(length=36), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", sa.String(length=36), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("group_id", "student_id", name="uq_student_groups_group_student"),
    )
    for column in ("group_id", "student_id", "branch_id"):
        op.create_index(f"ix_student_groups_{column}", "student_groups", [column])


def downgrade() -> None:
    for column in ("group_id", "student_id", "branch_id"):
        op.drop_index(f"ix_student_groups_{column}", table_name="student_groups")
    op.drop_table("student_groups")
    op.drop_index("uq_group_schedule_slots_room_time", table_name="group_schedule_slots")
    op.drop_index("uq_group_schedule_slots_teacher_time", table_name="group_schedule_slots")
    op.drop_index("ix_group_schedule_slots_day", table_name="group_schedule_slots")
    op.drop_index("ix_group_schedule_slots_group_id", table_name="group_schedule_slots")
    op.drop_table("group_schedule_slots")
    for column in ("course_id", "room_id", "teacher_id", "branch_id"):
        op.drop_index(f"ix_groups_{column}", table_name="groups")
    op.drop_table("groups")
    group_status_enum.drop(op.get_bind(), checkfirst=True)
