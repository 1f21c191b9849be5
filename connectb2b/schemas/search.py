"""
schemas/search.py — Pydantic models for business search and company disclosure

Business Rules:
- Filters are optional; missing or blank filters match everything
- userid / compid are accepted for compatibility and checked against the
  caller's identity by the router
- compid must be a positive company id

Called by: routers/search.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class BusinessSearch(BaseModel):
    userid: int | None = None
    compid: int | None = None
    category: str | None = Field(default="", max_length=255)
    location: str | None = Field(default="", max_length=255)
    businesstype: str | None = Field(default="", max_length=255)

    @field_validator("category", "location", "businesstype", mode="before")
    @classmethod
    def strip_filter(cls, v):
        if v is None:
            return ""
        return str(v).strip()


class CompanyLookup(BaseModel):
    compid: int = Field(..., gt=0)


class SearchResultRow(BaseModel):
    company_id: int
    name: str
    category: str
    locations: str
    turnover: str
    status: str


class CompanyDetails(BaseModel):
    details: str
    tier: str


class CompanySummary(BaseModel):
    summary: str


class CompanyDescriptionOut(BaseModel):
    company_id: int
    tier: str
    text: str
