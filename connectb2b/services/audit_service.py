"""Search audit log — best-effort, append-only record of search criteria.

Each search submits one record. Writes happen in their own session on a
small thread pool owned by the app lifespan, so a slow or failing audit
store never fails or delays the search response, and a caller that
disconnects does not cancel the write.

Usage:
    audit = SearchAuditLog(SessionLocal, ThreadPoolExecutor(max_workers=2))
    audit.submit(user_id, criteria)   # never raises
    audit.close()                     # on shutdown, drains queued writes
"""

from concurrent.futures import Executor

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..errors import AuditWriteFailed
from ..models import SearchCriteriaLog


class SearchAuditLog:
    def __init__(self, session_factory: sessionmaker, executor: Executor | None = None):
        self._session_factory = session_factory
        self._executor = executor

    def record(self, user_id: int | None, criteria) -> None:
        """Write one audit row. Raises AuditWriteFailed on store errors."""
        try:
            with self._session_factory() as db:
                db.add(
                    SearchCriteriaLog(
                        user_id=user_id,
                        criteria=criteria.render(),
                        criteria_json=criteria.as_record(),
                    )
                )
                db.commit()
        except SQLAlchemyError as e:
            raise AuditWriteFailed(detail=str(e)) from e

    def _record_quietly(self, user_id: int | None, criteria) -> None:
        try:
            self.record(user_id, criteria)
        except AuditWriteFailed as e:
            logger.warning(
                "Search audit write failed for user {} ({}): {}",
                user_id, criteria.render(), e.detail,
            )
        except Exception:
            logger.exception("Search audit write crashed for user {}", user_id)

    def submit(self, user_id: int | None, criteria) -> None:
        """Fire-and-forget: queue the write, or run it inline without an executor."""
        if self._executor is None:
            self._record_quietly(user_id, criteria)
            return
        try:
            self._executor.submit(self._record_quietly, user_id, criteria)
        except RuntimeError:
            # Executor already shut down (app stopping)
            logger.warning("Search audit executor closed — dropping record for user {}", user_id)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
