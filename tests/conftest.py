import io
import os
import tempfile
from datetime import date, datetime, timedelta, timezone

# Configure before the application module builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PHOTO_STORAGE_DIR"] = tempfile.mkdtemp(prefix="achievehub-test-")
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from httpx import AsyncClient, ASGITransport
from PIL import Image

from achievehub.dependencies import get_db
from achievehub.extensions import db
from achievehub.main import app
from achievehub.models import Achievement, AchievementPhoto
from achievehub.services.photo_storage import PhotoStorage, get_photo_storage
from achievehub.services.profiles import register_user

PASSWORD = "password123"


def png_bytes(color="red", size=(8, 8)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def make_user(session, email, name=None, role="student", password=PASSWORD):
    return register_user(session, email=email, name=name or email.split("@")[0].title(), password=password, role=role)


def make_achievement(session, owner, status="approved", featured=False, category="competition",
                     title="Won the robotics cup", minutes_ago=0, **fields):
    achievement = Achievement(
        user_id=owner.id,
        title=title,
        short_description=fields.pop("short_description", "First place overall"),
        description=fields.pop("description", "Our team built a line-following robot in a week."),
        category=category,
        tags=fields.pop("tags", ["robotics"]),
        achievement_date=fields.pop("achievement_date", date(2024, 5, 1)),
        status=status,
        is_featured=featured,
        upvotes=0,
        media_url="/storage/achievement-photos/1/1-cup.png",
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        **fields,
    )
    achievement.photo_rows.append(
        AchievementPhoto(storage_path="1/1-cup.png", public_url="/storage/achievement-photos/1/1-cup.png")
    )
    session.add(achievement)
    session.commit()
    return achievement


@pytest.fixture(name="session")
def session_fixture():
    db.create_all()
    session = db.SessionLocal()
    try:
        yield session
    finally:
        session.close()
        db.drop_all()


@pytest.fixture(name="storage")
def storage_fixture(tmp_path):
    return PhotoStorage(root=str(tmp_path), bucket="achievement-photos", public_base="/storage")


@pytest.fixture(name="client")
def client_fixture(session, storage):
    def get_db_override():
        yield session

    app.dependency_overrides[get_db] = get_db_override
    app.dependency_overrides[get_photo_storage] = lambda: storage
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def student(session):
    return make_user(session, "student@example.com", "Sam Student")


@pytest.fixture
def other_student(session):
    return make_user(session, "other@example.com", "Olive Other")


@pytest.fixture
def faculty(session):
    return make_user(session, "faculty@example.com", "Fay Faculty", role="faculty")


@pytest.fixture
def admin(session):
    return make_user(session, "admin@example.com", "Ada Admin", role="admin")


async def login(client, email, password=PASSWORD):
    response = await client.post("/auth/login", data={"email": email, "password": password})
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    return response
