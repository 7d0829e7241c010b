# app/db/session.py
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool


def _serialize_sqlite_writes(engine: AsyncEngine) -> None:
    """
    SQLite en archivo con varias conexiones: cada transacción arranca con
    BEGIN IMMEDIATE y toma el lock de escritura de entrada. Las demás
    esperan (timeout) en vez de fallar con "database is locked" al
    subir de lector a escritor. También deja SAVEPOINT funcionando bien.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _no_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def sync_url(db_url: str) -> str:
    """
    URL equivalente para un motor SÍNCRONO (alembic).
    - postgres: +asyncpg -> +psycopg (psycopg3)
    - sqlite: +aiosqlite -> driver estándar
    """
    if "+aiosqlite" in db_url:
        return db_url.replace("+aiosqlite", "", 1)
    if "+asyncpg" in db_url:
        return db_url.replace("+asyncpg", "+psycopg", 1)
    if "+psycopg" in db_url:
        return db_url
    return db_url.replace("postgresql://", "postgresql+psycopg://", 1)


def build_engine(db_url: str) -> AsyncEngine:
    """
    Crea el engine según el driver de la URL.
    Timeouts cortos: si la DB no responde → falla rápido (5s).
    """
    if db_url.startswith("sqlite+aiosqlite"):
        # ":memory:" debe compartir UNA conexión o cada sesión vería otra DB
        if db_url in ("sqlite+aiosqlite://", "sqlite+aiosqlite:///:memory:"):
            return create_async_engine(
                db_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        engine = create_async_engine(
            db_url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        _serialize_sqlite_writes(engine)
        return engine

    if db_url.startswith("postgresql+psycopg"):
        # psycopg (async) usa 'connect_timeout' en segundos
        connect_args = {"connect_timeout": 5}
    elif db_url.startswith("postgresql+asyncpg"):
        connect_args = {
            "timeout": 5,
            "server_settings": {"client_encoding": "UTF8"},
        }
    else:
        connect_args = {}

    return create_async_engine(
        db_url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=10,
        connect_args=connect_args,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    # sin commit explícito → rollback al cerrar
    async with request.app.state.sessionmaker() as session:
        try:
            yield session
        finally:
            await session.close()
