"""Search audit trail — append-only, written by services/audit_service.py."""

from sqlalchemy import Column, Index, Integer, Text

from .base import Base, UTCDateTime, utcnow


class SearchCriteriaLog(Base):
    __tablename__ = "search_criteria_details"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer)  # no FK: the audit row must outlive its user
    criteria = Column(Text, nullable=False)  # "Category = .., Location = .., Business Type = .."
    criteria_json = Column(Text, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow)

    __table_args__ = (Index("ix_search_criteria_user_created", "user_id", "created_at"),)
