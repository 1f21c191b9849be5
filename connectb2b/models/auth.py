"""User identity model.

Users are created by the external auth service; this core only resolves
a session user to the company it acts for.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import Base, UTCDateTime, utcnow


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(255))
    company_id = Column(Integer, ForeignKey("companies.id"), index=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(UTCDateTime, default=utcnow)

    company = relationship("Company", foreign_keys=[company_id])
