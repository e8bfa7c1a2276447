import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from educenter import models  # noqa: F401
from educenter.api.deps import get_db
from educenter.core.security import get_password_hash
from educenter.db.base import Base
from educenter.main import app
from educenter.models.user import User, UserRole

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "password123"


@pytest.fixture()
def session_factory():
    # One in-memory database per test, shared by every session through StaticPool.
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def admin_headers(client, session_factory):
    with session_factory() as session:
        session.add(
            User(
                name="Admin User",
                email=ADMIN_EMAIL,
                hashed_password=get_password_hash(ADMIN_PASSWORD),
                role=UserRole.admin,
            )
        )
        session.commit()
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture()
def branch_setup(client, admin_headers):
    """An active branch with a category, a course, two teachers and two rooms."""
    branch = client.post("/api/branches", json={"name": "Downtown"}, headers=admin_headers)
    assert branch.status_code == 201
    branch_id = branch.json()["id"]

    category = client.post(
        "/api/course-categories", json={"name": "Languages", "branchId": branch_id}, headers=admin_headers
    )
    assert category.status_code == 201
    course = client.post(
        "/api/courses",
        json={"name": "English A1", "branchId": branch_id, "categoryId": category.json()["id"], "price": 100},
        headers=admin_headers,
    )
    assert course.status_code == 201

    teachers = []
    for index, name in enumerate(("Teacher One", "Teacher Two")):
        teacher = client.post(
            "/api/teachers",
            json={
                "fullname": name,
                "phone": f"+10000000{index}",
                "gender": "FEMALE",
                "branchId": branch_id,
            },
            headers=admin_headers,
        )
        assert teacher.status_code == 201
        teachers.append(teacher.json()["id"])

    rooms = []
    for name in ("Room 1", "Room 2"):
        room = client.post(
            "/api/rooms", json={"name": name, "capacity": 20, "branchId": branch_id}, headers=admin_headers
        )
        assert room.status_code == 201
        rooms.append(room.json()["id"])

    return {
        "branch_id": branch_id,
        "category_id": category.json()["id"],
        "course_id": course.json()["id"],
        "teacher_ids": teachers,
        "room_ids": rooms,
    }
