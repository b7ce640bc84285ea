import os
from datetime import datetime, timedelta, timezone

TEST_DB_FILE = "test_tutorhub.db"

# must be set before tutorhub.core.config is imported
os.environ["DATABASE_URL"] = f"sqlite:///./{TEST_DB_FILE}"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from tutorhub.core.deps import get_db, get_file_storage, get_notifier  # noqa: E402
from tutorhub.core.security import hash_password  # noqa: E402
from tutorhub.db.base import Base  # noqa: E402
from tutorhub.db.session import engine  # noqa: E402
from tutorhub.main import app  # noqa: E402
from tutorhub.models.assignment import Assignment  # noqa: E402
from tutorhub.models.group import Group  # noqa: E402
from tutorhub.models.membership import Membership  # noqa: E402
from tutorhub.models.submission import Submission, SubmissionRevision  # noqa: E402
from tutorhub.models.user import User  # noqa: E402
from tutorhub.services.storage import LocalFileStorage  # noqa: E402

PASSWORD = "password123"

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[int, str]] = []

    def notify(self, group_id: int, message: str) -> None:
        self.sent.append((group_id, message))


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def seed():
    """Seed a clean minimal dataset for each test and return its ids."""
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        db.query(SubmissionRevision).delete()
        db.query(Submission).delete()
        db.query(Assignment).delete()
        db.query(Membership).delete()
        db.query(Group).delete()
        db.query(User).delete()
        db.commit()

        hashed = hash_password(PASSWORD)

        def user(email, role, name):
            return User(email=email, full_name=name, role=role, hashed_password=hashed)

        teacher = user("teacher1@example.com", "teacher", "Teacher One")
        other_teacher = user("teacher2@example.com", "teacher", "Teacher Two")
        student = user("student1@example.com", "student", "Student One")
        student2 = user("student2@example.com", "student", "Student Two")
        student3 = user("student3@example.com", "student", "Student Three")
        parent = user("parent1@example.com", "parent", "Parent One")
        db.add_all([teacher, other_teacher, student, student2, student3, parent])
        db.commit()

        lesson = Group(
            name="Algebra I",
            group_type="LESSON",
            max_students=2,
            is_active=True,
            teacher_id=teacher.id,
        )
        support = Group(
            name="Homework help",
            group_type="SUPPORT",
            is_active=True,
            teacher_id=teacher.id,
        )
        db.add_all([lesson, support])
        db.commit()

        db.add(Membership(group_id=lesson.id, student_id=student.id))
        db.commit()

        # Assignment (future due date so it is ACTIVE)
        assignment = Assignment(
            group_id=lesson.id,
            teacher_id=teacher.id,
            title="HW1",
            due_date=datetime.now(timezone.utc) + timedelta(days=10),
            total_points=100,
        )
        db.add(assignment)
        db.commit()

        yield {
            "teacher": teacher.id,
            "other_teacher": other_teacher.id,
            "student": student.id,
            "student2": student2.id,
            "student3": student3.id,
            "parent": parent.id,
            "lesson": lesson.id,
            "support": support.id,
            "assignment": assignment.id,
        }
    finally:
        db.close()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def client(notifier, tmp_path):
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_file_storage] = lambda: LocalFileStorage(tmp_path, "/files")
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def login(client, email: str, password: str = PASSWORD) -> dict:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture()
def teacher_headers(client):
    return login(client, "teacher1@example.com")


@pytest.fixture()
def other_teacher_headers(client):
    return login(client, "teacher2@example.com")


@pytest.fixture()
def student_headers(client):
    return login(client, "student1@example.com")


@pytest.fixture()
def student2_headers(client):
    return login(client, "student2@example.com")
