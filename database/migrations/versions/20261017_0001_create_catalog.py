"""create branches, catalog, people and users

Revision ID: 20261017_0001
Revises: None
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


branch_status_enum = sa.Enum("ACTIVE", "INACTIVE", name="branch_status")
course_status_enum = sa.Enum("ACTIVE", "DRAFT", "ARCHIVED", name="course_status")
teacher_status_enum = sa.Enum("ACTIVE", "INACTIVE", name="teacher_status")
student_status_enum = sa.Enum("ACTIVE", "INACTIVE", name="student_status")
user_role_enum = sa.Enum("ADMIN", "MANAGER", "TEACHER", "STUDENT", name="user_role")
# Shared by teachers and students, so it is created once up front.
gender_enum = postgresql.ENUM("MALE", "FEMALE", name="gender", create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    gender_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "branches",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("region", sa.String(length=200), nullable=True),
        sa.Column("district", sa.String(length=200), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("status", branch_status_enum, nullable=False, server_default="ACTIVE"),
        *_timestamps(),
    )

    op.create_table(
        "course_categories",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_course_categories_branch_id", "course_categories", ["branch_id"])

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "category_id",
            sa.String(length=36),
            sa.ForeignKey("course_categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("status", course_status_enum, nullable=False, server_default="ACTIVE"),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("duration_hours", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration_months", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_courses_branch_id", "courses", ["branch_id"])
    op.create_index("ix_courses_category_id", "courses", ["category_id"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("branch_id", "name", name="uq_rooms_branch_name"),
    )
    op.create_index("ix_rooms_branch_id", "rooms", ["branch_id"])

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("fullname", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("gender", gender_enum, nullable=False),
        sa.Column("birthday", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", teacher_status_enum, nullable=False, server_default="ACTIVE"),
        sa.Column("hashed_password", sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_teachers_branch_id", "teachers", ["branch_id"])
    op.create_index("ix_teachers_email", "teachers", ["email"], unique=True)

    op.create_table(
        "students",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("fullname", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("gender", gender_enum, nullable=True),
        sa.Column("birthday", sa.Date(), nullable=True),
        sa.Column("status", student_status_enum, nullable=False, server_default="ACTIVE"),
        sa.Column("other_details", sa.JSON(), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_students_branch_id", "students", ["branch_id"])
    op.create_index("ix_students_email", "students", ["email"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_branch_id", "users", ["branch_id"])


def downgrade() -> None:
    op.drop_index("ix_users_branch_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_students_email", table_name="students")
    op.drop_index("ix_students_branch_id", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_teachers_email", table_name="teachers")
    op.drop_index("ix_teachers_branch_id", table_name="teachers")
    op.drop_table("teachers")
    op.drop_index("ix_rooms_branch_id", table_name="rooms")
    op.drop_table("rooms")
    op.drop_index("ix_courses_category_id", table_name="courses")
    op.drop_index("ix_courses_branch_id", table_name="courses")
    op.drop_table("courses")
    op.drop_index("ix_course_categories_branch_id", table_name="course_categories")
    op.drop_table("course_categories")
    op.drop_table("branches")

    bind = op.get_bind()
    for enum in (
        user_role_enum,
        student_status_enum,
        teacher_status_enum,
        course_status_enum,
        branch_status_enum,
        gender_enum,
    ):
        enum.drop(bind, checkfirst=True)
