"""Store failure handling — bounded retries for reads, fast failure for writes.

Transient store failures (dropped connections, pool checkout timeouts,
statement timeouts) become StoreUnavailable. Read paths retry with
exponential backoff first; write paths roll back and raise immediately so
callers never see a half-applied change.

Usage:
    rows = read_with_retry(db, _query_rows, viewer_id, criteria)

    with store_write_guard(db):
        db.execute(stmt)
        db.commit()
"""

import time
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import StoreUnavailable


def is_transient(err: BaseException) -> bool:
    """True for store errors worth retrying."""
    if isinstance(err, (sa_exc.OperationalError, sa_exc.TimeoutError)):
        return True
    return isinstance(err, sa_exc.DBAPIError) and bool(err.connection_invalidated)


def read_with_retry(db: Session, fn, *args, **kwargs):
    """Call fn(db, *args, **kwargs), retrying transient store errors.

    Raises StoreUnavailable once settings.store_read_retries attempts fail.
    Non-transient errors propagate unchanged on the first attempt.
    """
    attempts = max(1, settings.store_read_retries)
    for attempt in range(attempts):
        try:
            return fn(db, *args, **kwargs)
        except (sa_exc.DBAPIError, sa_exc.TimeoutError) as e:
            if not is_transient(e):
                raise
            db.rollback()
            if attempt < attempts - 1:
                delay = settings.store_retry_base_delay * (2 ** attempt)
                logger.warning(
                    "Store read failed (attempt {}/{}), retry in {:.2f}s: {}",
                    attempt + 1, attempts, delay, e,
                )
                time.sleep(delay)
                continue
            logger.error("Store read failed after {} attempts: {}", attempts, e)
            raise StoreUnavailable(detail=str(e)) from e


@contextmanager
def store_write_guard(db: Session):
    """Roll back and surface StoreUnavailable on transient write failures."""
    try:
        yield
    except (sa_exc.DBAPIError, sa_exc.TimeoutError) as e:
        db.rollback()
        if is_transient(e):
            logger.error("Store write failed: {}", e)
            raise StoreUnavailable(detail=str(e)) from e
        raise
