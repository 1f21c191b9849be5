"""
conftest.py — Shared Test Fixtures for Connect B2B

Provides an in-memory SQLite database, FastAPI TestClient with identity
and audit-log overrides, and factory fixtures for reference data,
companies and users.

Business Rules:
- All tests run against an isolated in-memory DB (no prod data risk)
- Identity is overridden so tests don't need the external auth service
- Each test function gets fresh tables

Called by: all test files via pytest autodiscovery
Depends on: connectb2b.models (Base), connectb2b.database (get_db), connectb2b.dependencies
"""

import os
os.environ["TESTING"] = "1"  # Must be set before importing connectb2b modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from connectb2b.models import (
    Base, CategoryMaster, Company, CompanyLocation, CompanySubcategory,
    Location, Personnel, TurnoverBand, User,
)
from connectb2b.services.audit_service import SearchAuditLog

# ── In-memory SQLite engine ──────────────────────────────────────────

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _enable_fk(dbapi_conn, _):
    """SQLite ignores FKs by default — turn them on."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def reference_data(db_session: Session) -> dict:
    """Categories, locations and turnover bands, keyed by name/short code."""
    categories = {
        name: CategoryMaster(name=name, type="C")
        for name in ("Steel", "Textiles", "Alloys", "Pipes", "Logistics")
    }
    locations = {name: Location(name=name) for name in ("Pune", "Delhi", "Mumbai", "Chennai")}
    bands = {
        "MSME": TurnoverBand(display="Up to 5 Crore", short="MSME"),
        "MID": TurnoverBand(display="5 to 100 Crore", short="MID"),
        "LARGE": TurnoverBand(display="Above 100 Crore", short="LARGE"),
    }
    db_session.add_all([*categories.values(), *locations.values(), *bands.values()])
    db_session.commit()
    return {"categories": categories, "locations": locations, "bands": bands}


@pytest.fixture()
def make_company(db_session: Session, reference_data: dict):
    """Factory: company with a primary category, band, locations, sub-categories, personnel."""

    def _make(
        name,
        category="Steel",
        band="MSME",
        locations=(),
        subcategories=(),
        personnel=(),
        founding_year=2010,
        status="active",
    ):
        co = Company(
            name=name,
            founding_year=founding_year,
            main_business_category_id=reference_data["categories"][category].id,
            turnover_id=reference_data["bands"][band].id if band else None,
            status=status,
        )
        db_session.add(co)
        db_session.flush()
        for loc in locations:
            db_session.add(
                CompanyLocation(company_id=co.id, location_id=reference_data["locations"][loc].id)
            )
        for sub in subcategories:
            db_session.add(
                CompanySubcategory(company_id=co.id, subcategory_id=reference_data["categories"][sub].id)
            )
        for person in personnel:
            db_session.add(Personnel(company_id=co.id, **person))
        db_session.commit()
        db_session.refresh(co)
        return co

    return _make


@pytest.fixture()
def viewer_company(make_company) -> Company:
    """The company the test user acts for."""
    return make_company("Zenith Traders", category="Logistics", band="MID", locations=["Mumbai"])


@pytest.fixture()
def acme(make_company) -> Company:
    """A steel company in Pune with one contact person."""
    return make_company(
        "Acme",
        category="Steel",
        band="MSME",
        locations=["Pune"],
        subcategories=["Pipes"],
        personnel=[{
            "name": "Ravi Kumar", "designation": "Director",
            "phone": "9800000001", "email": "ravi@acme.example",
        }],
        founding_year=2014,
    )


@pytest.fixture()
def test_user(db_session: Session, viewer_company: Company) -> User:
    user = User(email="owner@zenith.example", name="Zenith Owner", company_id=viewer_company.id)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def make_user(db_session: Session):
    def _make(company: Company, email: str) -> User:
        user = User(email=email, name=email.split("@")[0], company_id=company.id)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def session_factory() -> sessionmaker:
    """Factory for extra sessions on the test database (audit writer, stale readers)."""
    return TestSessionLocal


@pytest.fixture()
def audit_log() -> SearchAuditLog:
    """Inline audit writer bound to the test database."""
    return SearchAuditLog(TestSessionLocal)


@pytest.fixture()
def legacy_connections():
    """Factory: a connection to a separate DB holding a pre-constraint connections table.

    Rows are (id, sender, receiver, status, constatus); returns the open
    connection so callers can run raw repair SQL against it.
    """
    legacy_engine = create_engine("sqlite://", poolclass=StaticPool)
    conn = legacy_engine.connect()

    def _make(rows):
        conn.execute(text(
            "CREATE TABLE connections ("
            " id INTEGER PRIMARY KEY, sender_company_id INTEGER,"
            " receiver_company_id INTEGER, status VARCHAR(20), constatus VARCHAR(1))"
        ))
        for row in rows:
            conn.execute(
                text("INSERT INTO connections VALUES (:id, :s, :r, :status, :con)"),
                dict(zip(("id", "s", "r", "status", "con"), row)),
            )
        conn.commit()
        return conn

    yield _make
    conn.close()
    legacy_engine.dispose()


def _client_for(db_session: Session, user: User, audit: SearchAuditLog):
    from connectb2b.database import get_db
    from connectb2b.dependencies import get_search_audit, require_user
    from connectb2b.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[require_user] = lambda: user
    app.dependency_overrides[get_search_audit] = lambda: audit
    return app


@pytest.fixture()
def client(db_session: Session, test_user: User, audit_log: SearchAuditLog) -> TestClient:
    """TestClient acting as test_user (Zenith Traders).

    Overrides get_db to use the test session, require_user to skip the
    external auth service, and the audit log to write inline.
    """
    app = _client_for(db_session, test_user, audit_log)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def client_as(db_session: Session, audit_log: SearchAuditLog):
    """Factory: TestClient acting as any given user. Only one at a time."""
    from connectb2b.main import app

    clients = []

    def _make(user: User) -> TestClient:
        _client_for(db_session, user, audit_log)
        c = TestClient(app)
        clients.append(c)
        return c

    yield _make
    app.dependency_overrides.clear()
