"""
Database engine and session for async SQLAlchemy 2.x.
The engine owns the connection pool; it is built once by create_app and injected
through app.state, never held as a module global.
"""
from __future__ import annotations

import json
import ssl
from collections.abc import AsyncGenerator
from typing import Any, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from menu_api.config import Settings
from menu_api.core.logging import get_logger

logger = get_logger(__name__)

# Bare URL schemes mapped to the async driver used for them
ASYNC_DRIVERS = {
    "mysql": "mysql+aiomysql",
    "mariadb": "mariadb+aiomysql",
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}

SSL_QUERY_KEYS = ("ssl", "sslmode", "ssl-mode", "ssl_mode")
_SSL_OFF = {"", "0", "false", "off", "disable", "disabled"}
_SSL_NO_VERIFY = {"allow", "prefer", "require", "required", "preferred"}


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""

    pass


def _ssl_context(value: str) -> Optional[ssl.SSLContext]:
    """
    Build an SSL context from a URL query value.
    Accepts libpq/MySQL modes (require, verify-full, ...) and the mysql2 JSON form
    ({"rejectUnauthorized": true}). Returns None when encryption is switched off.
    """
    raw = value.strip()
    verify = True
    if raw.startswith("{"):
        try:
            options = json.loads(raw)
        except ValueError:
            options = {}
        verify = bool(options.get("rejectUnauthorized", True))
    elif raw.lower() in _SSL_OFF:
        return None
    elif raw.lower() in _SSL_NO_VERIFY:
        verify = False

    ctx = ssl.create_default_context()
    if not verify:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def normalize_database_url(database_url: str) -> tuple[URL, dict[str, Any]]:
    """
    Map a connection descriptor to an async SQLAlchemy URL plus driver connect_args.
    SSL options are lifted out of the query string into an SSLContext.
    """
    url = make_url(database_url)
    drivername = ASYNC_DRIVERS.get(url.drivername, url.drivername)
    connect_args: dict[str, Any] = {}

    ssl_values = [url.query[k] for k in SSL_QUERY_KEYS if k in url.query]
    if ssl_values:
        value = ssl_values[0]
        if isinstance(value, tuple):
            value = value[0]
        ctx = _ssl_context(value)
        if ctx is not None:
            connect_args["ssl"] = ctx
        url = url.difference_update_query(SSL_QUERY_KEYS)

    return url.set(drivername=drivername), connect_args


def describe_target(url: URL) -> str:
    """host:port/database, never credentials."""
    host = url.host or "localhost"
    port = f":{url.port}" if url.port else ""
    return f"{host}{port}/{url.database or ''}"


def create_engine(settings: Settings) -> AsyncEngine:
    url, connect_args = normalize_database_url(settings.database_url)
    kwargs: dict[str, Any] = {"echo": settings.db_echo}
    if connect_args:
        kwargs["connect_args"] = connect_args
    if url.get_backend_name() != "sqlite":
        kwargs.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
        )
    return create_async_engine(url, **kwargs)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def probe(engine: AsyncEngine) -> bool:
    """Best-effort connectivity check at startup. Logs the outcome, never raises."""
    target = describe_target(engine.url)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("database_connect_failed", extra={"db_target": target, "error": str(e)})
        return False
    logger.info("database_connected", extra={"db_target": target})
    return True


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency: yield a session from the app's pool; rollback on error."""
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
