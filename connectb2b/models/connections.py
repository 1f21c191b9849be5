"""Connection model — directed request between two companies.

`constatus` mirrors whether `status` is accepted. It is never set on its
own: the `status` validator derives it on every assignment, bulk UPDATEs
use constatus_for(), and a CHECK constraint holds the store to it.
"""

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, validates

from .base import Base, UTCDateTime, utcnow


class ConnectionStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ConnectionStatus.PENDING


def constatus_for(status) -> str:
    """Derive the Y/N connected mirror from a status."""
    return "Y" if ConnectionStatus(status) is ConnectionStatus.ACCEPTED else "N"


class Connection(Base):
    __tablename__ = "connections"
    id = Column(Integer, primary_key=True)
    sender_company_id = Column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    receiver_company_id = Column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    status = Column(String(20), nullable=False, default=ConnectionStatus.PENDING.value)
    constatus = Column(String(1), nullable=False, default="N")
    message = Column(Text)
    reply_message = Column(Text)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    sender = relationship("Company", foreign_keys=[sender_company_id])
    receiver = relationship("Company", foreign_keys=[receiver_company_id])

    @validates("status")
    def _derive_constatus(self, key, value):
        value = ConnectionStatus(value).value
        self.constatus = constatus_for(value)
        return value

    __table_args__ = (
        UniqueConstraint(
            "sender_company_id", "receiver_company_id", name="uq_connections_pair"
        ),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')", name="ck_connections_status"
        ),
        CheckConstraint(
            "(status = 'accepted' AND constatus = 'Y') OR "
            "(status <> 'accepted' AND constatus = 'N')",
            name="ck_connections_constatus",
        ),
        CheckConstraint(
            "sender_company_id <> receiver_company_id", name="ck_connections_not_self"
        ),
        Index("ix_connections_receiver_status", "receiver_company_id", "status", "created_at"),
        Index("ix_connections_sender", "sender_company_id"),
    )
