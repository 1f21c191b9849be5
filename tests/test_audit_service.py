"""
test_audit_service.py — Tests for services/audit_service.py

Covers direct writes, swallowed failures, the executor path and
shutdown behaviour.

Called by: pytest
Depends on: connectb2b/services/audit_service.py, conftest.py
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
from loguru import logger
from sqlalchemy.exc import OperationalError

from connectb2b.errors import AuditWriteFailed
from connectb2b.models import SearchCriteriaLog
from connectb2b.services.audit_service import SearchAuditLog
from connectb2b.services.search_service import SearchCriteria


def _broken_factory():
    raise OperationalError("INSERT", {}, Exception("audit store down"))


@pytest.fixture()
def warnings():
    messages = []
    handler_id = logger.add(lambda m: messages.append(str(m)), level="WARNING", format="{message}")
    yield messages
    logger.remove(handler_id)


class TestRecord:
    def test_writes_rendered_and_json_criteria(self, db_session, session_factory):
        audit = SearchAuditLog(session_factory)
        audit.record(5, SearchCriteria.from_filters("Steel", "", "MSME"))
        row = db_session.query(SearchCriteriaLog).one()
        assert row.user_id == 5
        assert row.criteria == "Category = Steel, Location = , Business Type = MSME"
        assert row.criteria_json == (
            '{"business_type": "MSME", "category": "Steel", "location": ""}'
        )
        assert row.created_at is not None

    def test_store_error_becomes_audit_write_failed(self):
        audit = SearchAuditLog(_broken_factory)
        with pytest.raises(AuditWriteFailed) as exc_info:
            audit.record(5, SearchCriteria())
        assert "audit store down" in exc_info.value.detail


class TestSubmit:
    def test_inline_without_executor(self, db_session, session_factory):
        SearchAuditLog(session_factory).submit(3, SearchCriteria.from_filters("Pipes"))
        assert db_session.query(SearchCriteriaLog).count() == 1

    def test_failure_logged_not_raised(self, warnings):
        SearchAuditLog(_broken_factory).submit(3, SearchCriteria.from_filters("Pipes"))
        assert any("Search audit write failed for user 3" in m for m in warnings)

    def test_unexpected_error_logged_not_raised(self, warnings):
        def _crashing_factory():
            raise RuntimeError("session factory misconfigured")

        SearchAuditLog(_crashing_factory).submit(7, SearchCriteria.from_filters("Steel"))
        assert any("Search audit write crashed for user 7" in m for m in warnings)

    def test_unexpected_error_on_executor_thread_is_logged(self, warnings):
        criteria = MagicMock()
        criteria.render.side_effect = TypeError("unrenderable criteria")
        executor = ThreadPoolExecutor(max_workers=1)
        audit = SearchAuditLog(MagicMock(), executor)
        audit.submit(8, criteria)
        audit.close()
        assert any("Search audit write crashed for user 8" in m for m in warnings)

    def test_executor_path(self, db_session, session_factory):
        audit = SearchAuditLog(session_factory, ThreadPoolExecutor(max_workers=1))
        audit.submit(9, SearchCriteria.from_filters(location="Pune"))
        audit.close()
        row = db_session.query(SearchCriteriaLog).one()
        assert row.user_id == 9

    def test_submit_after_close_is_dropped(self, warnings, session_factory):
        executor = MagicMock()
        executor.submit.side_effect = RuntimeError("cannot schedule new futures after shutdown")
        SearchAuditLog(session_factory, executor).submit(4, SearchCriteria())
        assert any("dropping record for user 4" in m for m in warnings)

    def test_close_without_executor(self, session_factory):
        SearchAuditLog(session_factory).close()
