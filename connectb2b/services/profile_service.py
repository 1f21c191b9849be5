"""Profile service — update a company and rebuild its location/sub-category links.

Business Rules:
- Only the company itself may update its profile
- Location and sub-category names resolve against the reference tables;
  an unknown name rejects the whole update before anything is written
- The company row is locked, links are deleted and re-inserted, and the
  whole update commits as one transaction; any failure rolls back so the
  company keeps its previous links
- A scalar field absent from the update is left alone; an explicit None
  clears it, except the company name, which cannot be cleared
- Passing None for a list leaves those links untouched; [] clears them

Called by: routers/companies.py
Depends on: models (Company, CompanyLocation, CompanySubcategory, Location, CategoryMaster)
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..errors import NotFound, PermissionDenied, ValidationError
from ..models import (
    CategoryMaster,
    Company,
    CompanyLocation,
    CompanySubcategory,
    Location,
    TurnoverBand,
)
from ..models.directory import CATEGORY_BUSINESS
from ..utils.store_retry import store_write_guard

log = logging.getLogger("connectb2b.profile")

SCALAR_FIELDS = (
    "name",
    "founding_year",
    "main_business_category_id",
    "turnover_id",
    "contact",
    "email",
    "website",
    "business_desc",
)
REQUIRED_FIELDS = ("name",)


def _resolve_names(db: Session, model, names: list[str], label: str, **filters) -> list[int]:
    """Map reference names (case-insensitive) to ids, rejecting unknown ones."""
    wanted = {n.strip().lower(): n.strip() for n in names if n and n.strip()}
    if not wanted:
        return []
    rows = (
        db.query(model.id, model.name)
        .filter_by(**filters)
        .filter(func.lower(model.name).in_(list(wanted)))
        .all()
    )
    found = {name.lower(): rid for rid, name in rows}
    missing = sorted(v for k, v in wanted.items() if k not in found)
    if missing:
        raise ValidationError(f"Unknown {label}: {', '.join(missing)}")
    return sorted(set(found.values()))


def _check_reference(db: Session, model, ref_id, label: str, **filters) -> None:
    if ref_id is None:
        return
    if not db.query(model.id).filter_by(id=ref_id, **filters).first():
        raise ValidationError(f"Unknown {label}: {ref_id}")


def update_company_profile(
    db: Session, company_id: int, actor_company_id: int, update: dict
) -> Company:
    """Apply a profile update and rebuild link tables atomically."""
    if company_id != actor_company_id:
        raise PermissionDenied("A company can only update its own profile")
    if not db.get(Company, company_id):
        raise NotFound(f"Company {company_id} not found")
    for field in REQUIRED_FIELDS:
        if field in update and update[field] is None:
            raise ValidationError(f"{field} cannot be cleared")

    _check_reference(
        db, CategoryMaster, update.get("main_business_category_id"),
        "business category", type=CATEGORY_BUSINESS,
    )
    _check_reference(db, TurnoverBand, update.get("turnover_id"), "turnover band")

    locations = update.get("locations")
    sub_categories = update.get("sub_categories")
    location_ids = (
        _resolve_names(db, Location, locations, "locations") if locations is not None else None
    )
    subcategory_ids = (
        _resolve_names(db, CategoryMaster, sub_categories, "sub-categories", type=CATEGORY_BUSINESS)
        if sub_categories is not None
        else None
    )

    try:
        with store_write_guard(db):
            company = (
                db.query(Company).filter(Company.id == company_id).with_for_update().one()
            )
            for field in SCALAR_FIELDS:
                if field in update:
                    setattr(company, field, update[field])

            if location_ids is not None:
                db.query(CompanyLocation).filter(
                    CompanyLocation.company_id == company_id
                ).delete(synchronize_session=False)
                db.add_all(
                    CompanyLocation(company_id=company_id, location_id=lid)
                    for lid in location_ids
                )
            if subcategory_ids is not None:
                db.query(CompanySubcategory).filter(
                    CompanySubcategory.company_id == company_id
                ).delete(synchronize_session=False)
                db.add_all(
                    CompanySubcategory(company_id=company_id, subcategory_id=sid)
                    for sid in subcategory_ids
                )
            db.commit()
    except Exception:
        db.rollback()
        log.exception("Profile update failed for company %d — rolled back", company_id)
        raise

    db.refresh(company)
    db.expire(company, ["locations", "subcategories"])
    log.info(
        "Profile updated for company %d (locations=%s, sub_categories=%s)",
        company_id,
        "kept" if location_ids is None else len(location_ids),
        "kept" if subcategory_ids is None else len(subcategory_ids),
    )
    return company
