# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Database engine and session factory."""

from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from classroom.shared.config import load_config
from classroom.shared.logging import logger

_config = load_config()


class Base(DeclarativeBase):
    pass


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def create_db_engine(
    url: str,
    *,
    pool_size: int = 10,
    max_overflow: int = 5,
    pool_timeout: float = 30.0,
) -> Engine:
    connect_args: dict[str, object] = {}
    if _is_sqlite(url):
        connect_args = {
            "check_same_thread": False,
            "timeout": int(pool_timeout),
        }

    engine = create_engine(
        url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        connect_args=connect_args,
    )

    if _is_sqlite(url):
        busy_ms = int(pool_timeout * 1000)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            try:
                cur.execute("PRAGMA journal_mode=WAL;")
                cur.execute("PRAGMA synchronous=NORMAL;")
                cur.execute("PRAGMA foreign_keys=ON;")
                cur.execute(f"PRAGMA busy_timeout={busy_ms};")
            finally:
                cur.close()

    return engine


ENGINE: Engine = create_db_engine(
    _config.database.url,
    pool_size=_config.database.pool_size,
    max_overflow=_config.database.max_overflow,
    pool_timeout=_config.database.pool_timeout,
)

SessionFactory = sessionmaker(
    bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False
)


def init_db(engine: Engine | None = None) -> None:
    from . import models  # noqa: F401  registers tables on Base.metadata

    Base.metadata.create_all(bind=engine or ENGINE)
    logger.info("Database schema ensured")
