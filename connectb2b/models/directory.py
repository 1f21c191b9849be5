"""Directory models — Companies, their one-to-many attributes, and reference data.

Reference tables (category_master, locations, turnover_bands) are supplied
externally and only read here. Link tables are rebuilt wholesale on
profile update (see services/profile_service.py).
"""

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base, UTCDateTime, utcnow

COMPANY_ACTIVE = "active"
COMPANY_INACTIVE = "inactive"

CATEGORY_BUSINESS = "C"
CATEGORY_ARTICLE = "A"


class CategoryMaster(Base):
    __tablename__ = "category_master"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(1), nullable=False, default=CATEGORY_BUSINESS)  # C | A

    __table_args__ = (Index("ix_category_master_type_name", "type", "name"),)


class Location(Base):
    __tablename__ = "locations"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)


class TurnoverBand(Base):
    """Coarse annual revenue band: long display label plus short code."""

    __tablename__ = "turnover_bands"
    id = Column(Integer, primary_key=True)
    display = Column(String(255), nullable=False)  # e.g. "Up to 5 Crore"
    short = Column(String(50), nullable=False)  # e.g. "MSME"


class Company(Base):
    __tablename__ = "companies"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    founding_year = Column(Integer)
    main_business_category_id = Column(Integer, ForeignKey("category_master.id"))
    turnover_id = Column(Integer, ForeignKey("turnover_bands.id"))
    status = Column(String(20), nullable=False, default=COMPANY_ACTIVE)  # soft delete only

    gstin = Column(String(20), unique=True)
    contact = Column(String(100))
    email = Column(String(255))
    website = Column(String(500))
    business_desc = Column(Text)

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    main_category = relationship("CategoryMaster")
    turnover = relationship("TurnoverBand")
    locations = relationship(
        "CompanyLocation", back_populates="company", cascade="all, delete-orphan"
    )
    subcategories = relationship(
        "CompanySubcategory", back_populates="company", cascade="all, delete-orphan"
    )
    personnel = relationship(
        "Personnel", back_populates="company", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_companies_name", "name"),
        Index("ix_companies_status", "status"),
    )


class CompanyLocation(Base):
    __tablename__ = "company_locations"
    id = Column(Integer, primary_key=True)
    company_id = Column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)

    company = relationship("Company", back_populates="locations")
    location = relationship("Location")

    __table_args__ = (
        UniqueConstraint("company_id", "location_id", name="uq_company_location"),
        Index("ix_company_locations_company", "company_id"),
    )


class CompanySubcategory(Base):
    __tablename__ = "company_subcategories"
    id = Column(Integer, primary_key=True)
    company_id = Column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    subcategory_id = Column(Integer, ForeignKey("category_master.id"), nullable=False)

    company = relationship("Company", back_populates="subcategories")
    subcategory = relationship("CategoryMaster")

    __table_args__ = (
        UniqueConstraint("company_id", "subcategory_id", name="uq_company_subcategory"),
        Index("ix_company_subcategories_company", "company_id"),
    )


class Personnel(Base):
    """Contact person at a company — disclosed only in the detail tier."""

    __tablename__ = "company_personnel"
    id = Column(Integer, primary_key=True)
    company_id = Column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String(255), nullable=False)
    designation = Column(String(255))
    phone = Column(String(100))
    email = Column(String(255))

    company = relationship("Company", back_populates="personnel")

    __table_args__ = (Index("ix_company_personnel_company", "company_id"),)
