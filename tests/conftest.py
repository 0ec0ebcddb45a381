"""
Exam seating - test configuration and fixtures
"""
import os

os.environ.setdefault('ENVIRONMENT', 'testing')
os.environ.setdefault('JWT_SECRET_KEY', 'test-jwt-secret-key-for-testing')
os.environ.setdefault('DATABASE_URL', 'sqlite:///./test_exam_seating.db')
os.environ.setdefault('NOTIFICATIONS_ENABLED', 'true')

import datetime as dt

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from exam_seating.database import Base, get_db
from exam_seating.db_models import DepartmentDB, SectionDB, UserDB, UserRole
from exam_seating.main_api import app
from exam_seating.security import create_access_token

fake = Faker()


@pytest.fixture
def engine(tmp_path):
    test_engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30}
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    """Session for arranging data and checking results directly"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """Test client whose requests each get their own session on the test database"""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def department(db_session):
    dept = DepartmentDB(name="Computer Science", code="CSE")
    db_session.add(dept)
    db_session.commit()
    return dept


@pytest.fixture
def other_department(db_session):
    dept = DepartmentDB(name="Mechanical", code="MECH")
    db_session.add(dept)
    db_session.commit()
    return dept


@pytest.fixture
def section(db_session, department):
    sec = SectionDB(name="CSE-5A", semester=5, department_id=department.id)
    db_session.add(sec)
    db_session.commit()
    return sec


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(role, department=None, section=None, is_active=True, name=None):
        counter["n"] += 1
        user = UserDB(
            name=name or fake.name(),
            email=f"user{counter['n']}.{fake.user_name()}@example.edu",
            role=role,
            enrollment_number=f"1CS{counter['n']:04d}" if role == UserRole.STUDENT else None,
            is_active=is_active,
            department_id=department.id if department else None,
            section_id=section.id if section else None,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def faculty(make_user, department):
    return make_user(UserRole.FACULTY, department=department)


@pytest.fixture
def hod(make_user, department):
    return make_user(UserRole.HOD, department=department)


@pytest.fixture
def students(make_user, department, section):
    return [make_user(UserRole.STUDENT, department=department, section=section) for _ in range(5)]


@pytest.fixture
def exam_date():
    return dt.date(2026, 11, 2)


def auth_headers(user) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers
