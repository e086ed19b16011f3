import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"

from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from dependencies import create_access_token, get_password_hash
from main import app
from models import Event, User

PASSWORD = "password123"
PASSWORD_HASH = get_password_hash(PASSWORD)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest_asyncio.fixture
async def client(db_session):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(role="student", **fields):
        counter["n"] += 1
        data = {
            "full_name": f"Student {counter['n']}",
            "email": f"student{counter['n']}@college.edu",
            "password": PASSWORD_HASH,
            "role": role,
        }
        data.update(fields)
        user = User(**data)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", full_name="Admin", email="admin@college.edu")


@pytest.fixture
def student(make_user):
    return make_user()


@pytest.fixture
def make_event(db_session, admin):
    def _make_event(**fields):
        data = {
            "title": "Tech Talk",
            "description": "An evening of lightning talks",
            "category": "seminar",
            "date": date.today() + timedelta(days=7),
            "start_time": "18:00",
            "end_time": "20:00",
            "location": "Main Hall",
            "max_participants": 100,
            "created_by_id": admin.id,
        }
        data.update(fields)
        event = Event(**data)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event


@pytest.fixture
def event(make_event):
    return make_event()


def auth_headers(user):
    token = create_access_token(data={"sub": user.email})
    return {"Authorization": f"Bearer {token}"}
