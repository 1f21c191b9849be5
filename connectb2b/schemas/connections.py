"""
schemas/connections.py — Pydantic models for connection request endpoints

Business Rules:
- Action must be Accept or Reject (case-insensitive, past tense accepted)
- Messages max 2000 chars
- Sender and receiver must be positive company ids

Called by: routers/connections.py
Depends on: pydantic, services/connection_service.py (action parsing)
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConnectionRequestCreate(BaseModel):
    sender_company_id: int = Field(..., gt=0)
    receiver_company_id: int = Field(..., gt=0)
    message: str | None = Field(default=None, max_length=2000)


class PendingConnectionsQuery(BaseModel):
    receiver_company_id: int = Field(..., gt=0)


class ConnectionAction(BaseModel):
    action: str
    replmessage: str | None = Field(default=None, max_length=2000)

    @field_validator("action")
    @classmethod
    def known_action(cls, v: str) -> str:
        cleaned = (v or "").strip()
        if cleaned.lower() not in ("accept", "accepted", "reject", "rejected"):
            raise ValueError("action must be Accept or Reject")
        return cleaned


class ConnectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_company_id: int
    receiver_company_id: int
    status: str
    constatus: str
    message: str | None = None
    reply_message: str | None = None
    created_at: datetime | None = None


class PendingConnection(BaseModel):
    id: int
    sender_company_id: int
    name: str
    message: str | None = None
    sendon: str | None = None
    created_at: str | None = None


class ReceivedConnection(BaseModel):
    id: int
    sender_company_id: int
    cname: str
    contact: str | None = None
    status: str
    connected: bool
