"""
startup.py — Database Startup Migrations (Idempotent)

Tables, columns, indexes and CHECK constraints are defined in the ORM
models and created via Base.metadata.create_all(checkfirst=True). This file
only handles store-side repairs that can't be expressed in the ORM: bringing
rows written before the status/constatus constraint back in line.

Called by: main.py lifespan
Depends on: database.py (engine), models (Base)
"""

import logging
import os

from sqlalchemy import text as sqltext

from .database import engine

log = logging.getLogger(__name__)


def run_startup_migrations() -> None:
    """Execute all idempotent startup operations. Safe to call on every app boot."""
    if os.environ.get("TESTING"):
        log.info("TESTING mode — skipping startup migrations")
        return

    from .models import Base
    Base.metadata.create_all(bind=engine, checkfirst=True)
    log.info("ORM schema sync complete (create_all checkfirst=True)")

    with engine.connect() as conn:
        _normalize_connection_status(conn)

    log.info("Startup migrations complete")


def _exec(conn, stmt: str) -> None:
    """Execute a single statement with rollback on failure."""
    try:
        conn.execute(sqltext(stmt))
        conn.commit()
    except Exception as e:
        log.warning("Startup statement failed: %s", e)
        conn.rollback()


def _normalize_connection_status(conn) -> None:
    """Map legacy free-text labels onto the closed set.

    Accept labels become 'accepted'; 'pending' in any case or an empty
    status stays 'pending'; any other label ('Reject', 'Declined', ...)
    was a refusal and becomes 'rejected'.
    """
    _exec(conn, """
        UPDATE connections SET status = 'accepted', constatus = 'Y'
        WHERE lower(trim(status)) IN ('accept', 'accepted')
          AND (status <> 'accepted' OR coalesce(constatus, '') <> 'Y')
    """)
    _exec(conn, """
        UPDATE connections SET status = 'pending', constatus = 'N'
        WHERE (status IS NULL OR lower(trim(status)) IN ('', 'pending'))
          AND (status IS NULL OR status <> 'pending' OR coalesce(constatus, '') <> 'N')
    """)
    _exec(conn, """
        UPDATE connections SET status = 'rejected', constatus = 'N'
        WHERE status NOT IN ('accepted', 'pending')
          AND (status <> 'rejected' OR coalesce(constatus, '') <> 'N')
    """)
