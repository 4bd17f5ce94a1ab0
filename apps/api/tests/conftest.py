import os

os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from membership.core.db import get_db
from membership.main import app
from membership.models.base import Base
from membership.models import entities  # noqa: F401
from membership.models.entities import RoleEnum, User
from membership.services.passwords import hash_password


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "s3cret-pass"


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def make_user(db, username: str, role: RoleEnum, password: str = PASSWORD) -> User:
    user = User(username=username, name=username.title(), role=role, password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login(test_client: TestClient, username: str, password: str = PASSWORD):
    resp = test_client.post("/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp


@pytest.fixture
def seeded_users(db_session):
    return {
        "reader": make_user(db_session, "reader", RoleEnum.user),
        "admin": make_user(db_session, "admin", RoleEnum.admin),
        "superadmin": make_user(db_session, "root", RoleEnum.superadmin),
    }


def _logged_in(username: str):
    with TestClient(app) as test_client:
        login(test_client, username)
        yield test_client


@pytest.fixture
def user_client(seeded_users):
    yield from _logged_in("reader")


@pytest.fixture
def admin_client(seeded_users):
    yield from _logged_in("admin")


@pytest.fixture
def superadmin_client(seeded_users):
    yield from _logged_in("root")


def family_payload(name: str = "Garcia Lopez", **overrides) -> dict:
    payload = {
        "name": name,
        "address": "Calle Mayor 1",
        "phone": "600000000",
        "email": "garcia@example.com",
        "joinDate": "2023-09-01",
        "status": "ACTIVE",
        "members": [
            {"firstName": "Ana", "lastName": "Lopez", "role": "MOTHER", "birthDate": "1984-05-02"},
            {"firstName": "Luis", "lastName": "Garcia", "role": "FATHER", "birthDate": "1981-01-20"},
            {"firstName": "Sara", "lastName": "Garcia", "role": "CHILD", "birthDate": "2016-03-11"},
        ],
    }
    payload.update(overrides)
    return payload
