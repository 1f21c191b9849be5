"""
tests/test_rate_limiting.py — Tests for rate limiting behavior

Covers: slowapi rate limiter configuration and that the search endpoint
keeps answering while limiting is disabled for tests.

Called by: pytest
Depends on: connectb2b.rate_limit, routers/search.py
"""

import os


def test_limiter_uses_remote_address():
    """Key function is get_remote_address (IP-based limiting)."""
    from slowapi.util import get_remote_address

    from connectb2b.rate_limit import limiter
    assert limiter._key_func is get_remote_address


def test_limiter_attached_to_app():
    from connectb2b.main import app
    from connectb2b.rate_limit import limiter
    assert app.state.limiter is limiter


def test_rate_limit_disabled_in_test_mode():
    """conftest sets RATE_LIMIT_ENABLED=false before the app is imported."""
    from connectb2b.rate_limit import limiter
    assert os.environ.get("RATE_LIMIT_ENABLED") == "false"
    assert limiter.enabled is False


def test_search_endpoint_not_blocked(client):
    for _ in range(5):
        resp = client.post("/api/search/business", json={})
        assert resp.status_code == 200
