import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="catalog-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DIR}/catalog.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TEST_DIR, "uploads"))
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from app.core.config import settings
from app.core.database import async_session_maker, close_db, create_db_and_tables, drop_db_and_tables
from app.main import app
from app.models.review import Review
from app.models.user import User


def create_access_token(user_id: str, role: str = "user") -> str:
    return jwt.encode({"userId": user_id, "role": role}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@pytest_asyncio.fixture(autouse=True)
async def database():
    await drop_db_and_tables()
    await create_db_and_tables()
    yield
    await close_db()


@pytest_asyncio.fixture
async def db():
    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def author(db):
    user = User(email="author@example.com", username="author", role="admin")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def reviewer(db):
    user = User(email="reviewer@example.com", username="reviewer")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
def add_review(db):
    async def _add_review(product_id: str, user_id: str, comment: str = "Great", rating: int = 5) -> Review:
        review = Review(product_id=product_id, user_id=user_id, comment=comment, rating=rating)
        db.add(review)
        await db.commit()
        await db.refresh(review)
        return review
    return _add_review


@pytest.fixture
def admin_headers(author):
    return {"Authorization": f"Bearer {create_access_token(author.id, role='admin')}"}


@pytest.fixture
def user_headers(reviewer):
    return {"Authorization": f"Bearer {create_access_token(reviewer.id, role='user')}"}
