"""Seed a demo branch with rooms, teachers, students and a conflict-free timetable.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import select

from educenter.core.config import get_settings
from educenter.core.exceptions import ConflictError
from educenter.core.security import get_password_hash
from educenter.db.bootstrap import create_schema, ensure_seed_admin
from educenter.db.session import SessionLocal
from educenter.models.branch import Branch
from educenter.models.category import CourseCategory
from educenter.models.course import Course
from educenter.models.group import Group
from educenter.models.room import Room
from educenter.models.student import Student
from educenter.models.teacher import Gender, Teacher
from educenter.schemas.enrollment import EnrollmentCreate
from educenter.schemas.group import GroupCreate
from educenter.services.enrollment_service import enroll_student
from educenter.services.group_service import create_group

logger = logging.getLogger("seed_demo_data")

DEFAULT_PASSWORD = os.getenv("DEMO_PASSWORD", "DemoPass123!")
BRANCH_NAME = os.getenv("DEMO_BRANCH_NAME", "Downtown")

ROOMS = [("Room 101", 16), ("Room 102", 24), ("Lab A", 40)]
TEACHERS = [
    ("Aziza Karimova", "+998901110001", "aziza.demo@example.com", Gender.female),
    ("Bekzod Tursunov", "+998901110002", "bekzod.demo@example.com", Gender.male),
]
COURSES = [("General English", 450_000.0, 6), ("Python Basics", 600_000.0, 4)]
GROUPS = [
    # name, course index, teacher index, room index, days, start_time
    ("ENG-1", 0, 0, 0, ["MON", "WED", "FRI"], "09:00:00"),
    ("ENG-2", 0, 0, 0, ["TUE", "THU", "SAT"], "09:00:00"),
    ("PY-1", 1, 1, 2, ["MON", "WED"], "14:00:00"),
    ("PY-2", 1, 1, 2, ["TUE", "THU"], "14:00:00"),
]
STUDENT_COUNT = 12


def _get_or_create(session, model, defaults: dict | None = None, **lookup):
    instance = session.execute(select(model).filter_by(**lookup)).scalar_one_or_none()
    if instance is None:
        instance = model(**lookup, **(defaults or {}))
        session.add(instance)
        session.flush()
    return instance


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    create_schema()

    with SessionLocal() as session:
        ensure_seed_admin(session, settings)

        branch = _get_or_create(session, Branch, name=BRANCH_NAME, defaults={"region": "Tashkent"})
        category = _get_or_create(session, CourseCategory, name="Languages and IT", branch_id=branch.id)
        rooms = [
            _get_or_create(session, Room, name=name, branch_id=branch.id, defaults={"capacity": capacity})
            for name, capacity in ROOMS
        ]
        teachers = [
            _get_or_create(
                session,
                Teacher,
                email=email,
                defaults={
                    "fullname": fullname,
                    "phone": phone,
                    "gender": gender,
                    "branch_id": branch.id,
                    "hashed_password": get_password_hash(DEFAULT_PASSWORD),
                },
            )
            for fullname, phone, email, gender in TEACHERS
        ]
        courses = [
            _get_or_create(
                session,
                Course,
                name=name,
                branch_id=branch.id,
                defaults={"category_id": category.id, "price": price, "duration_months": months},
            )
            for name, price, months in COURSES
        ]
        students = [
            _get_or_create(
                session,
                Student,
                email=f"student{index:02d}.demo@example.com",
                defaults={"fullname": f"Demo Student {index:02d}", "branch_id": branch.id, "other_details": {}},
            )
            for index in range(1, STUDENT_COUNT + 1)
        ]
        session.commit()

        for name, course_index, teacher_index, room_index, days, start_time in GROUPS:
            if session.execute(select(Group).where(Group.branch_id == branch.id, Group.name == name)).first():
                continue
            create_group(
                session,
                GroupCreate(
                    name=name,
                    course_id=courses[course_index].id,
                    teacher_id=teachers[teacher_index].id,
                    room_id=rooms[room_index].id,
                    branch_id=branch.id,
                    days=days,
                    start_time=start_time,
                ),
            )

        groups = session.execute(select(Group).where(Group.branch_id == branch.id).order_by(Group.name)).scalars().all()
        for index, student in enumerate(students):
            group = groups[index % len(groups)]
            try:
                enroll_student(
                    session,
                    EnrollmentCreate(student_id=student.id, group_id=group.id, branch_id=branch.id),
                )
            except ConflictError:
                continue

    logger.info("Demo data ready for branch %s; demo password is %s", BRANCH_NAME, DEFAULT_PASSWORD)


if __name__ == "__main__":
    main()
