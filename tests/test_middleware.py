"""
test_middleware.py — Tests for request/response middleware

Verifies request ID generation, security headers, and the structured
error body shared by every error path in main.py.

Called by: pytest
Depends on: connectb2b/main.py (middleware, exception handlers), tests/conftest.py
"""


def test_request_id_header_present(client):
    """Every response should include X-Request-ID."""
    resp = client.get("/health")
    assert len(resp.headers["X-Request-ID"]) == 8  # uuid4()[:8]


def test_request_id_unique_per_request(client):
    ids = {client.get("/health").headers["X-Request-ID"] for _ in range(5)}
    assert len(ids) == 5


def test_health_returns_ok(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "1.0.0"}


def test_security_headers(client):
    resp = client.get("/health")
    assert resp.headers.get("X-Content-Type-Options") == "nosniff"
    assert resp.headers.get("X-Frame-Options") == "DENY"
    assert resp.headers.get("X-XSS-Protection") == "1; mode=block"
    assert resp.headers.get("Referrer-Policy") == "strict-origin-when-cross-origin"
    assert resp.headers.get("X-API-Version") == "v1"


def test_security_headers_on_api_endpoint(client):
    resp = client.get("/api/master/locations")
    assert resp.headers.get("X-Content-Type-Options") == "nosniff"
    assert "X-Request-ID" in resp.headers


def test_404_gets_request_id_and_error_body(client):
    """Even error responses carry the request ID and the structured body."""
    resp = client.get("/nonexistent-route-xyz")
    assert resp.status_code == 404
    data = resp.json()
    assert data["code"] == "not_found"
    assert data["status_code"] == 404
    assert data["request_id"] == resp.headers["X-Request-ID"]
    assert "error" in data


def test_global_exception_handler_registered():
    from connectb2b.main import app

    assert Exception in app.exception_handlers
