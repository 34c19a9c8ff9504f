# app/database.py
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Supabase Postgres connection (via pooler)
#
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=1       : keep only 1 connection to the Supabase pooler
# - max_overflow=0    : do not open extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
#
# Supabase Session mode limits the number of clients. If each backend
# process opens many connections (SQLAlchemy default pool_size 5+),
# you can easily hit:
#   "MaxClientsInSessionMode: max clients reached"
#
# SQLite URLs (local dev, tests) skip the pooler settings and turn on
# foreign key enforcement, which SQLite leaves off by default.
# ---------------------------------------------------------


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _with_sslmode(url: str) -> str:
    """Append sslmode=require if it is not already present."""
    if "sslmode=" in url:
        return url
    if "?" in url:
        return url + "&sslmode=require"
    return url + "?sslmode=require"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(db_url: str, **overrides) -> Engine:
    """
    Create an engine for the given URL with the right pool settings.

    Extra keyword arguments are passed through to `create_engine`
    (tests use this to pick a `StaticPool`).
    """
    if _is_sqlite(db_url):
        kwargs = {
            "echo": False,
            "connect_args": {"check_same_thread": False},
        }
        kwargs.update(overrides)
        sqlite_engine = create_engine(db_url, **kwargs)
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    kwargs = {
        "echo": False,  # set to True if you want to debug SQL queries
        "pool_pre_ping": True,
        "pool_size": 1,
        "max_overflow": 0,
    }
    kwargs.update(overrides)
    return create_engine(_with_sslmode(db_url), **kwargs)


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables(bind: Engine | None = None) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
