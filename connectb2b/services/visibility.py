"""Visibility gate — which disclosure tier a viewer gets for a company.

The gate, never the caller, picks the tier: detail (sub-categories and
personnel contacts included) only when viewer and target are connected,
summary otherwise. A company always sees its own detail.

Usage:
    desc = describe(db, viewer_company_id, target_company_id)
    desc.tier   # "detail" | "summary"
    desc.text   # "Acme is a 12 years old MSME company. ..."
"""

import enum
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session, joinedload

from ..errors import NotFound
from ..models import Company
from ..models.directory import COMPANY_ACTIVE
from ..utils.store_retry import read_with_retry
from .attributes import AttributeKind, aggregate_for_companies
from .connection_service import is_connected


class DisclosureTier(str, enum.Enum):
    DETAIL = "detail"
    SUMMARY = "summary"


@dataclass(frozen=True)
class CompanyDescription:
    company_id: int
    tier: DisclosureTier
    text: str


def _load_target(db: Session, company_id: int) -> Company:
    company = (
        db.query(Company)
        .options(joinedload(Company.main_category), joinedload(Company.turnover))
        .filter(Company.id == company_id, Company.status == COMPANY_ACTIVE)
        .first()
    )
    if not company:
        raise NotFound(f"Company {company_id} not found")
    return company


def summary_text(company: Company, locations: str, today: date | None = None) -> str:
    """'<name> is a <age> years old <short> company. Having business interest in ...'"""
    today = today or date.today()
    head = f"{company.name} is a"
    if company.founding_year:
        head += f" {today.year - company.founding_year} years old"
    if company.turnover and company.turnover.short:
        head += f" {company.turnover.short}"
    text = f"{head} company."

    category = company.main_category.name if company.main_category else ""
    if category or locations:
        text += " Having business interest"
        if category:
            text += f" in {category}"
        if locations:
            text += f" working in {locations}"
        text += "."
    return text


def detail_text(
    company: Company,
    locations: str,
    subcategories: str,
    personnel: str,
    today: date | None = None,
) -> str:
    text = summary_text(company, locations, today)
    if subcategories:
        text += f" Also deals in {subcategories}."
    if personnel:
        text += f" You can contact {personnel}."
    return text


def _render(db: Session, company: Company, tier: DisclosureTier, today: date | None) -> str:
    locations = aggregate_for_companies(db, AttributeKind.LOCATIONS, [company.id])[company.id]
    if tier is DisclosureTier.SUMMARY:
        return summary_text(company, locations, today)
    subcategories = aggregate_for_companies(
        db, AttributeKind.SUBCATEGORIES, [company.id]
    )[company.id]
    personnel = aggregate_for_companies(db, AttributeKind.PERSONNEL, [company.id])[company.id]
    return detail_text(company, locations, subcategories, personnel, today)


def tier_for(db: Session, viewer_company_id: int, target_company_id: int) -> DisclosureTier:
    if viewer_company_id == target_company_id:
        return DisclosureTier.DETAIL
    if is_connected(db, viewer_company_id, target_company_id):
        return DisclosureTier.DETAIL
    return DisclosureTier.SUMMARY


def describe(
    db: Session,
    viewer_company_id: int,
    target_company_id: int,
    today: date | None = None,
) -> CompanyDescription:
    """Describe target for viewer at the tier their connection state allows."""
    company = read_with_retry(db, _load_target, target_company_id)
    tier = tier_for(db, viewer_company_id, target_company_id)
    text = read_with_retry(db, _render, company, tier, today)
    return CompanyDescription(company_id=company.id, tier=tier, text=text)


def summarize(db: Session, target_company_id: int, today: date | None = None) -> CompanyDescription:
    """Summary tier for anyone; it discloses nothing the search row does not."""
    company = read_with_retry(db, _load_target, target_company_id)
    text = read_with_retry(db, _render, company, DisclosureTier.SUMMARY, today)
    return CompanyDescription(company_id=company.id, tier=DisclosureTier.SUMMARY, text=text)
