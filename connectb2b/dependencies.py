"""
dependencies.py — Shared FastAPI Dependencies

Resolves the caller's identity (consumed from the session set by the
external auth service) and hands out shared resources. All routers import
from here instead of defining their own auth logic.

Business Rules:
- get_user returns None if not logged in (non-throwing)
- require_user raises 401 if not logged in, 403 if deactivated
- require_company_user raises 403 if the user acts for no company
- get_search_audit returns the app-wide SearchAuditLog built in the lifespan

Called by: all routers
Depends on: models, database
"""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .database import get_db, get_session_factory
from .models import User
from .services.audit_service import SearchAuditLog

log = logging.getLogger(__name__)


# ── Authentication ────────────────────────────────────────────────────


def get_user(request: Request, db: Session) -> User | None:
    """Return current user from session, or None if not logged in."""
    uid = request.session.get("user_id")
    if not uid:
        return None
    return db.get(User, uid)


def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Dependency: raises 401 if no authenticated user, 403 if deactivated."""
    user = get_user(request, db)
    if not user:
        raise HTTPException(401, "Not authenticated")
    if not getattr(user, "is_active", True):
        request.session.clear()
        raise HTTPException(403, "Account deactivated")
    return user


def require_company_user(user: User = Depends(require_user)) -> User:
    """Dependency: the caller must act for a company."""
    if not user.company_id:
        raise HTTPException(403, "No company associated with this account")
    return user


# ── Shared resources ──────────────────────────────────────────────────


def get_search_audit(request: Request) -> SearchAuditLog:
    """App-wide audit log; falls back to an inline writer outside the lifespan."""
    audit = getattr(request.app.state, "search_audit", None)
    if audit is None:
        log.warning("Search audit log not initialised — writing inline")
        audit = SearchAuditLog(get_session_factory())
    return audit
