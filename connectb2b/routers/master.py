"""Reference data API — turnover bands, business categories, locations."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import CategoryMaster, Location, TurnoverBand, User
from ..models.directory import CATEGORY_BUSINESS
from ..schemas.companies import NamedOption, TurnoverOption

router = APIRouter(tags=["master"])


@router.get("/api/master/turnovers", response_model=list[TurnoverOption])
def list_turnovers(user: User = Depends(require_user), db: Session = Depends(get_db)):
    bands = db.query(TurnoverBand).order_by(TurnoverBand.id).all()
    return [TurnoverOption(id=b.id, turnover=f"{b.display} [{b.short}]") for b in bands]


@router.get("/api/master/categories", response_model=list[NamedOption])
def list_categories(user: User = Depends(require_user), db: Session = Depends(get_db)):
    rows = (
        db.query(CategoryMaster.id, CategoryMaster.name)
        .filter(CategoryMaster.type == CATEGORY_BUSINESS)
        .order_by(CategoryMaster.name)
        .all()
    )
    return [NamedOption(id=i, name=n) for i, n in rows]


@router.get("/api/master/locations", response_model=list[NamedOption])
def list_locations(user: User = Depends(require_user), db: Session = Depends(get_db)):
    rows = db.query(Location.id, Location.name).order_by(Location.name).all()
    return [NamedOption(id=i, name=n) for i, n in rows]
