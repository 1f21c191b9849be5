"""Database connection and session factory.

One engine (and its connection pool) per process. PostgreSQL connections
carry a connect timeout and a server-side statement timeout so no store
call blocks indefinitely.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from .config import settings


def _engine_kwargs(s) -> dict:
    if s.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": s.db_pool_size,
        "max_overflow": s.db_max_overflow,
        "pool_timeout": s.db_pool_timeout,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {
            "connect_timeout": s.db_connect_timeout,
            "options": f"-c statement_timeout={s.db_statement_timeout_ms}",
        },
    }


engine = create_engine(settings.database_url, **_engine_kwargs(settings))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


if not settings.is_sqlite:

    @event.listens_for(engine, "connect")
    def _set_timezone(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("SET timezone = 'UTC'")
        cursor.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    """Session factory for components that open their own sessions (audit log)."""
    return SessionLocal
