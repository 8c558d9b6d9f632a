"""测试公共 Fixtures：内存 SQLite、ASGI 客户端、预置图书"""

from datetime import datetime

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from library_api.database import Base, create_sessionmaker, get_db
from library_api.models.book import Book
from library_client.client import LibraryClient


# ──────────── 内存数据库引擎 ────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False)
TestSessionLocal = create_sessionmaker(test_engine)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """每个测试前建表，测试后清表"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # 每个测试有自己的事件循环，连接不能跨循环复用
    await test_engine.dispose()


async def _override_get_db():
    async with TestSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ──────────── FastAPI TestClient ────────────

@pytest_asyncio.fixture
async def client():
    from library_api.main import app

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def library():
    """指向测试后端的 LibraryClient"""
    from library_api.main import app

    app.dependency_overrides[get_db] = _override_get_db
    yield LibraryClient(base_url="http://test", transport=ASGITransport(app=app))
    app.dependency_overrides.clear()


# ──────────── 预置图书 ────────────

@pytest_asyncio.fixture
async def sample_book() -> Book:
    async with TestSessionLocal() as db:
        now = datetime.utcnow()
        book = Book(
            title="Dune",
            author="Frank Herbert",
            publication_year=1965,
            created_at=now,
            updated_at=now,
        )
        db.add(book)
        await db.commit()
        await db.refresh(book)
        return book
