"""SQLAlchemy engine, session factory, and declarative base.

Reads configuration from environment variables:
  DATABASE_URL          — SQLAlchemy URL (default: local SQLite file)
  STORE_TIMEOUT_SECONDS — bound applied to every record-store call
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./product_flow.db")
STORE_TIMEOUT_SECONDS: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

Base = declarative_base()


def make_session_factory(url: str = DATABASE_URL) -> sessionmaker:
    """Build a session factory for *url*.

    SQLite connections are shared with worker threads (the record store runs
    every call through ``asyncio.to_thread``), so ``check_same_thread`` is off.
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, connect_args=connect_args)
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(session_factory: sessionmaker) -> None:
    """Create all tables on the factory's engine."""
    # Import models so they register on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=session_factory.kw["bind"])
