"""
companies.py — Company Profile API

Business Rules:
- A company updates only its own profile
- Location / sub-category links are rebuilt atomically (see profile_service)

Called by: main.py (router mount)
Depends on: dependencies, services/profile_service, services/attributes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_company_user
from ..models import User
from ..schemas.companies import CompanyProfileUpdate, ProfileUpdateResult
from ..services.attributes import AttributeKind, aggregated_attribute
from ..services.profile_service import update_company_profile

router = APIRouter(tags=["companies"])


def _split(aggregated: str) -> list[str]:
    return aggregated.split(", ") if aggregated else []


@router.put("/api/company/{company_id}/profile", response_model=ProfileUpdateResult)
def update_profile(
    company_id: int,
    body: CompanyProfileUpdate,
    user: User = Depends(require_company_user),
    db: Session = Depends(get_db),
):
    """Update profile fields and rebuild location / sub-category links."""
    company = update_company_profile(db, company_id, user.company_id, body.to_update())
    return ProfileUpdateResult(
        id=company.id,
        name=company.name,
        locations=_split(aggregated_attribute(db, company.id, AttributeKind.LOCATIONS)),
        sub_categories=_split(
            aggregated_attribute(db, company.id, AttributeKind.SUBCATEGORIES)
        ),
    )
