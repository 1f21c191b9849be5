"""Attribute aggregator — one-to-many company attributes as display strings.

A company's locations, sub-categories and personnel render as the distinct
values, sorted lexicographically, joined with ", ". No rows renders as "".
Search and the visibility gate both render through here so a company reads
the same everywhere.

Usage:
    from connectb2b.services.attributes import AttributeKind, aggregated_attribute
    aggregated_attribute(db, company_id, AttributeKind.LOCATIONS)  # "Delhi, Pune"
"""

import enum
from collections import defaultdict
from typing import Iterable

from sqlalchemy.orm import Session

from ..models import CategoryMaster, CompanyLocation, CompanySubcategory, Location, Personnel

DELIMITER = ", "


class AttributeKind(str, enum.Enum):
    LOCATIONS = "locations"
    SUBCATEGORIES = "subcategories"
    PERSONNEL = "personnel"


def join_attribute_values(values: Iterable[str | None]) -> str:
    """Distinct non-empty values, sorted, joined with the display delimiter."""
    return DELIMITER.join(sorted({v for v in values if v}))


def personnel_line(name, designation, phone, email) -> str:
    """'name, designation, phone, email' with blank parts left out."""
    parts = (name, designation, phone, email)
    return DELIMITER.join(p.strip() for p in parts if p and p.strip())


def _pairs(db: Session, kind: AttributeKind, company_ids: list[int]) -> list[tuple[int, str]]:
    """(company_id, rendered value) rows for the given companies."""
    if kind is AttributeKind.LOCATIONS:
        rows = (
            db.query(CompanyLocation.company_id, Location.name)
            .join(Location, CompanyLocation.location_id == Location.id)
            .filter(CompanyLocation.company_id.in_(company_ids))
            .all()
        )
        return [(cid, name) for cid, name in rows]

    if kind is AttributeKind.SUBCATEGORIES:
        rows = (
            db.query(CompanySubcategory.company_id, CategoryMaster.name)
            .join(CategoryMaster, CompanySubcategory.subcategory_id == CategoryMaster.id)
            .filter(CompanySubcategory.company_id.in_(company_ids))
            .all()
        )
        return [(cid, name) for cid, name in rows]

    rows = (
        db.query(
            Personnel.company_id,
            Personnel.name,
            Personnel.designation,
            Personnel.phone,
            Personnel.email,
        )
        .filter(Personnel.company_id.in_(company_ids))
        .all()
    )
    return [(r[0], personnel_line(*r[1:])) for r in rows]


def aggregate_for_companies(
    db: Session, kind: AttributeKind, company_ids: Iterable[int]
) -> dict[int, str]:
    """Batch form: {company_id: aggregated string}, "" for companies with no rows."""
    ids = list(dict.fromkeys(company_ids))
    if not ids:
        return {}
    grouped: dict[int, list[str]] = defaultdict(list)
    for cid, value in _pairs(db, AttributeKind(kind), ids):
        grouped[cid].append(value)
    return {cid: join_attribute_values(grouped.get(cid, ())) for cid in ids}


def aggregated_attribute(db: Session, company_id: int, kind: AttributeKind) -> str:
    return aggregate_for_companies(db, kind, [company_id])[company_id]
