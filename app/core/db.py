# app/core/db.py

import ssl
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy import event

from app.core.config import (
    DATABASE_URL,
    DB_POOL_SIZE,
    DB_MAX_OVERFLOW,
    DB_POOL_TIMEOUT,
    DB_SSL_VERIFY,
    DB_ECHO_POOL,
    APP_ENV,
)

# =====================================================
# BASE
# =====================================================
Base = declarative_base()


# =====================================================
# CONNECTION CONFIG
# =====================================================
def _postgres_options() -> tuple[dict, dict]:
    ssl_ctx = ssl.create_default_context()

    if not DB_SSL_VERIFY:
        ssl_ctx.check_hostname = False
        ssl_ctx.verify_mode = ssl.CERT_NONE

    connect_args = {
        "ssl": ssl_ctx,
        # asyncpg behind a transaction pooler cannot keep prepared statements
        "statement_cache_size": 0,
        "prepared_statement_cache_size": 0,
    }
    pool_args = {
        "pool_size": DB_POOL_SIZE,
        "max_overflow": DB_MAX_OVERFLOW,
        "pool_timeout": DB_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }
    return connect_args, pool_args


def enable_sqlite_foreign_keys(dbapi_connection, _):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# =====================================================
# ENGINE
# =====================================================
def build_engine(url: str = DATABASE_URL, **overrides) -> AsyncEngine:
    """Create the async engine for ``url``; keyword overrides win over pool defaults."""
    if url.startswith("sqlite"):
        connect_args, pool_args = {"check_same_thread": False}, {}
    else:
        connect_args, pool_args = _postgres_options()

    new_engine = create_async_engine(
        url,
        echo=False,
        echo_pool=DB_ECHO_POOL,
        connect_args=connect_args,
        **{**pool_args, **overrides},
    )

    if url.startswith("sqlite"):
        event.listen(new_engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    return new_engine


engine = build_engine()

# =====================================================
# SESSION
# =====================================================
def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


AsyncSessionLocal = build_session_factory(engine)

# =====================================================
# DEPENDENCY
# =====================================================
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session

# =====================================================
# MODEL IMPORT
# =====================================================
import app.models  # noqa

# =====================================================
# DEV ONLY: AUTO CREATE TABLES
# =====================================================
async def init_models():
    if APP_ENV != "development":
        raise RuntimeError("init_models() is forbidden outside development")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
