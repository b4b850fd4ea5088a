"""
Database configuration - SQLAlchemy 2.x (sync)
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool
from offerflow.infrastructure.settings import get_settings

settings = get_settings()


def _engine_kwargs(url: str) -> dict:
    # SQLite is only used for local runs and tests; it rejects the pool sizing arguments
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


def enable_sqlite_savepoints(sqlite_engine: Engine) -> None:
    """
    Let SQLAlchemy emit BEGIN itself on pysqlite connections.

    The driver's implicit transaction handling breaks SAVEPOINT, which
    Session.begin_nested() relies on.
    """
    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str) -> Engine:
    built = create_engine(url, **_engine_kwargs(url))
    if url.startswith("sqlite"):
        enable_sqlite_savepoints(built)
    return built


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models - SQLAlchemy 2.x style"""
    pass


def get_db():
    """
    Dependency to get database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
