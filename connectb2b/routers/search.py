"""
search.py — Business Search & Company Disclosure API

Search the directory and describe one company at the tier the caller's
connection state allows.

Business Rules:
- The viewer is always the caller's company; body userid/compid naming
  someone else is rejected
- compdet re-checks the connection server-side and falls back to the
  summary text when the companies are not connected
- compsum is the summary tier for anyone

Called by: main.py (router mount)
Depends on: dependencies, services/search_service, services/visibility
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import get_search_audit, require_company_user
from ..models import User
from ..rate_limit import limiter
from ..schemas.search import (
    BusinessSearch,
    CompanyDescriptionOut,
    CompanyDetails,
    CompanyLookup,
    CompanySummary,
    SearchResultRow,
)
from ..services.audit_service import SearchAuditLog
from ..services.search_service import SearchCriteria, search_businesses
from ..services.visibility import describe, summarize

router = APIRouter(tags=["search"])


@router.post("/api/search/business", response_model=list[SearchResultRow])
@limiter.limit(settings.rate_limit_search)
def search_business(
    body: BusinessSearch,
    request: Request,
    user: User = Depends(require_company_user),
    db: Session = Depends(get_db),
    audit: SearchAuditLog = Depends(get_search_audit),
):
    """Search companies by category, location and business type."""
    if body.compid is not None and body.compid != user.company_id:
        raise HTTPException(403, "Cannot search on behalf of another company")
    if body.userid is not None and body.userid != user.id:
        raise HTTPException(403, "Cannot search on behalf of another user")

    criteria = SearchCriteria.from_filters(body.category, body.location, body.businesstype)
    rows = search_businesses(
        db, user.company_id, criteria, audit=audit, user_id=user.id
    )
    return [SearchResultRow(**row.__dict__) for row in rows]


@router.post("/api/search/compdet", response_model=CompanyDetails)
def company_details(
    body: CompanyLookup,
    user: User = Depends(require_company_user),
    db: Session = Depends(get_db),
):
    """Company description; detail only when the caller is connected to it."""
    desc = describe(db, user.company_id, body.compid)
    return CompanyDetails(details=desc.text, tier=desc.tier.value)


@router.post("/api/search/compsum", response_model=CompanySummary)
def company_summary(
    body: CompanyLookup,
    user: User = Depends(require_company_user),
    db: Session = Depends(get_db),
):
    """Company summary (reduced tier, no contacts)."""
    desc = summarize(db, body.compid)
    return CompanySummary(summary=desc.text)


@router.get("/api/search/company/{company_id}", response_model=CompanyDescriptionOut)
def describe_company(
    company_id: int,
    user: User = Depends(require_company_user),
    db: Session = Depends(get_db),
):
    """Unified description endpoint — the server picks the tier."""
    desc = describe(db, user.company_id, company_id)
    return CompanyDescriptionOut(
        company_id=desc.company_id, tier=desc.tier.value, text=desc.text
    )
