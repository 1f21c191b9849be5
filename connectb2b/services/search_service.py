"""Business search — filter companies by category, location and turnover band.

Business Rules:
- Each filter is a case-insensitive substring match; an empty filter
  matches everything, including companies missing that attribute
- Category matches the primary category name; business type matches the
  turnover band's display label or short code; location matches the
  aggregated locations string ("Delhi, Pune")
- Only active companies are listed, sorted by name
- Each row carries the viewer's connection status with that company
- Every search submits exactly one audit record, before the query runs

Called by: routers/search.py
Depends on: services/attributes.py, services/connection_service.py,
            services/audit_service.py
"""

import json
from dataclasses import dataclass

from loguru import logger
from sqlalchemy.orm import Session

from ..models import CategoryMaster, Company, TurnoverBand
from ..models.directory import COMPANY_ACTIVE
from ..utils.store_retry import read_with_retry
from .attributes import AttributeKind, aggregate_for_companies
from .connection_service import connected_company_ids

CONNECTED = "Connected"
NOT_CONNECTED = "Not Connected"


def _clean(value: str | None) -> str:
    return (value or "").strip()


@dataclass(frozen=True)
class SearchCriteria:
    category: str = ""
    location: str = ""
    business_type: str = ""

    @classmethod
    def from_filters(cls, category=None, location=None, business_type=None) -> "SearchCriteria":
        return cls(_clean(category), _clean(location), _clean(business_type))

    def render(self) -> str:
        return (
            f"Category = {self.category}, Location = {self.location}, "
            f"Business Type = {self.business_type}"
        )

    def as_record(self) -> str:
        return json.dumps(
            {
                "business_type": self.business_type,
                "category": self.category,
                "location": self.location,
            },
            sort_keys=True,
        )


@dataclass(frozen=True)
class SearchRow:
    company_id: int
    name: str
    category: str
    locations: str
    turnover: str
    status: str


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _query_rows(db: Session, viewer_company_id: int, criteria: SearchCriteria) -> list[SearchRow]:
    q = (
        db.query(Company.id, Company.name, CategoryMaster.name, TurnoverBand.display)
        .outerjoin(CategoryMaster, Company.main_business_category_id == CategoryMaster.id)
        .outerjoin(TurnoverBand, Company.turnover_id == TurnoverBand.id)
        .filter(Company.status == COMPANY_ACTIVE)
    )
    if criteria.category:
        q = q.filter(CategoryMaster.name.ilike(_like_pattern(criteria.category), escape="\\"))
    if criteria.business_type:
        pattern = _like_pattern(criteria.business_type)
        q = q.filter(
            TurnoverBand.display.ilike(pattern, escape="\\")
            | TurnoverBand.short.ilike(pattern, escape="\\")
        )
    companies = q.order_by(Company.name, Company.id).all()

    ids = [c[0] for c in companies]
    locations = aggregate_for_companies(db, AttributeKind.LOCATIONS, ids)
    needle = criteria.location.lower()
    if needle:
        companies = [c for c in companies if needle in locations[c[0]].lower()]
    connected = connected_company_ids(db, viewer_company_id, [c[0] for c in companies])

    return [
        SearchRow(
            company_id=cid,
            name=name,
            category=category or "",
            locations=locations[cid],
            turnover=turnover or "",
            status=CONNECTED if cid in connected else NOT_CONNECTED,
        )
        for cid, name, category, turnover in companies
    ]


def search_businesses(
    db: Session,
    viewer_company_id: int,
    criteria: SearchCriteria,
    *,
    audit=None,
    user_id: int | None = None,
) -> list[SearchRow]:
    """Run a business search for the viewer, auditing the criteria first."""
    if audit is not None:
        audit.submit(user_id, criteria)
    rows = read_with_retry(db, _query_rows, viewer_company_id, criteria)
    logger.debug("Search '{}' for company {}: {} rows", criteria.render(), viewer_company_id, len(rows))
    return rows
