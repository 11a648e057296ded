"""
Shared fixtures

- in-memory SQLite (aiosqlite) engine per test
- session and HTTP client bound to it
- discount code factory
"""

import os

os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DB_TYPE", "sqlite")
os.environ.setdefault("DISCOUNT_TIMEZONE", "UTC")

from datetime import datetime, timezone
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

from app.core.db import Base, build_engine, build_session_factory, get_db
from app.models.discounts.discount_code_models import DiscountCode, DiscountClassRule
from app.models.enums.discount_type import DiscountType

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def statements(engine):
    """SQL statements executed on the engine, in order."""
    executed = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        executed.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", _record)
    yield executed
    event.remove(engine.sync_engine, "before_cursor_execute", _record)


@pytest.fixture
def make_discount_code(db):
    """Insert a discount code with its class rules and commit."""

    async def _make(
        code="SUMMER20",
        *,
        discount_type=DiscountType.individual_percentage,
        percent=Decimal("20"),
        amount=None,
        universal=True,
        start_date=None,
        end_date=None,
        rules=(),
        external_id=None,
    ):
        discount = DiscountCode(
            code=code,
            external_id=external_id or f"ext-{code}",
            discount_type=discount_type,
            discount_percent=percent,
            discount_amount=amount,
            is_universal=universal,
            start_date=start_date,
            end_date=end_date,
            rules=[
                DiscountClassRule(class_id=class_id, is_eligible=eligible)
                for class_id, eligible in rules
            ],
        )
        db.add(discount)
        await db.commit()
        return discount

    return _make


@pytest_asyncio.fixture
async def client(session_factory):
    from main import app

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
