# db/session.py
# -*- coding: utf-8 -*-
"""
SQLAlchemy engine / session setup

- default: MySQL when every MySQL setting is present in .env
- fallback: SQLite file (grievance_dev.db) when they are not
- build_engine(url) lets tests and scripts point at another database
  (e.g. in-memory SQLite) without touching the environment
"""

import os
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from db.base import Base

# ---------------------------------------------------------
# 1) environment
# ---------------------------------------------------------

DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT", "3306")
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME")

# SQL echo for debugging
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

# seconds a SQLite writer waits for another transaction to commit
SQLITE_BUSY_TIMEOUT = float(os.getenv("SQLITE_BUSY_TIMEOUT", "15"))

# ---------------------------------------------------------
# 2) MySQL or SQLite fallback
# ---------------------------------------------------------

if DB_HOST and DB_USER and DB_PASSWORD and DB_NAME:
    DB_BACKEND = "mysql"
    DATABASE_URL = (
        f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        "?charset=utf8mb4"
    )
else:
    # local development runs without a database server
    DB_BACKEND = "sqlite"
    SQLITE_PATH = os.path.abspath(os.getenv("SQLITE_PATH", "./grievance_dev.db"))
    DATABASE_URL = f"sqlite:///{SQLITE_PATH}"


# ---------------------------------------------------------
# 3) Engine / SessionLocal
# ---------------------------------------------------------

def _sqlite_write_lock_on_begin(engine: Engine) -> None:
    """
    Open every SQLite transaction with BEGIN IMMEDIATE.

    pysqlite defers BEGIN to the first DML statement and SQLite ignores
    SELECT ... FOR UPDATE. BEGIN IMMEDIATE takes the write lock before the
    complaint row is read; a second writer waits up to the busy timeout.
    """

    @event.listens_for(engine, "connect")
    def _no_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(
    url: Optional[str] = None,
    echo: bool = DB_ECHO,
    busy_timeout: float = SQLITE_BUSY_TIMEOUT,
) -> Engine:
    url = url or DATABASE_URL
    engine_kwargs: Dict[str, Any] = {
        "echo": echo,
        "future": True,
    }

    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        # FastAPI serves requests from a thread pool
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": busy_timeout,
        }
        if ":memory:" in url or url == "sqlite://":
            # one shared connection, otherwise every session sees an empty db
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_recycle"] = 3600
        engine_kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **engine_kwargs)
    if is_sqlite:
        _sqlite_write_lock_on_begin(engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
        class_=Session,
    )


def init_db(engine: Engine) -> None:
    """Create the tables if they do not exist yet."""
    # register models on Base.metadata
    import db.models.complaint  # noqa: F401

    Base.metadata.create_all(bind=engine)


engine = build_engine()
SessionLocal = make_session_factory(engine)


