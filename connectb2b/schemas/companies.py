"""
schemas/companies.py — Pydantic models for company profile and reference data

Business Rules:
- Founding year between 1800 and 2100
- Location / sub-category lists are de-duplicated (case-insensitive),
  blanks dropped; None means "leave unchanged", [] means "clear"
- Email must contain @ and is lowercased

Called by: routers/companies.py, routers/master.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


def _dedupe_names(v: list[str] | None) -> list[str] | None:
    if v is None:
        return None
    seen: set[str] = set()
    result: list[str] = []
    for name in v:
        cleaned = str(name or "").strip()
        if cleaned and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            result.append(cleaned)
    return result


class CompanyProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    founding_year: int | None = Field(default=None, ge=1800, le=2100)
    primary_category: int | None = Field(default=None, gt=0)
    turnover: int | None = Field(default=None, gt=0)
    contact: str | None = Field(default=None, max_length=100)
    email: str | None = None
    website: str | None = Field(default=None, max_length=500)
    business_desc: str | None = None
    locations: list[str] | None = None
    sub_categories: list[str] | None = None

    @field_validator("locations", "sub_categories", mode="before")
    @classmethod
    def clean_names(cls, v):
        return _dedupe_names(v)

    @field_validator("email")
    @classmethod
    def clean_email(cls, v: str | None) -> str | None:
        if v is None:
            return None
        cleaned = v.strip().lower()
        if "@" not in cleaned:
            raise ValueError("email must contain @")
        return cleaned

    def to_update(self) -> dict:
        """Field names as stored on Company."""
        data = self.model_dump(exclude_unset=True)
        if "primary_category" in data:
            data["main_business_category_id"] = data.pop("primary_category")
        if "turnover" in data:
            data["turnover_id"] = data.pop("turnover")
        return data


class ProfileUpdateResult(BaseModel):
    id: int
    name: str
    locations: list[str]
    sub_categories: list[str]


class TurnoverOption(BaseModel):
    id: int
    turnover: str


class NamedOption(BaseModel):
    id: int
    name: str
