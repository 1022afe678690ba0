# storecast/database.py
from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from storecast.core.config import get_settings

# ---------------------------------------------------------
# Supabase Postgres connection (via pooler)
#
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=2       : concurrent page fetches each hold one connection
# - max_overflow=0    : do not open extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
#
# Supabase Session mode limits the number of clients, so keep the pool
# small to avoid "MaxClientsInSessionMode: max clients reached".
# ---------------------------------------------------------


def _database_url() -> str:
    db_url = get_settings().DATABASE_URL
    if db_url.startswith("postgresql") and "sslmode=" not in db_url:
        separator = "&" if "?" in db_url else "?"
        db_url = f"{db_url}{separator}sslmode=require"
    return db_url


@lru_cache
def get_engine() -> Engine:
    """
    Lazily build the engine on first use.

    SQLite URLs (local development, tests) get `check_same_thread=False`
    so sessions can be opened from worker threads.
    """
    db_url = _database_url()
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        db_url,
        echo=False,  # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        pool_size=2,
        max_overflow=0,
    )


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(get_engine())


def new_session() -> Session:
    """Open a standalone Session (caller is responsible for closing it)."""
    return Session(get_engine())


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(get_engine()) as session:
        yield session


def call_with_session(fn, *args, **kwargs):
    """
    Run `fn(session, *args, **kwargs)` inside its own short-lived Session.

    Used for page fetches dispatched to worker threads, which must not
    share the request Session.
    """
    with new_session() as session:
        return fn(session, *args, **kwargs)
