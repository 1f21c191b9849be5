"""
connections.py — Connection Request API

Send connection requests, list incoming ones, and accept or reject them.

Business Rules:
- A company sends requests only as itself
- Only the receiver lists and answers requests addressed to it
- Answering an already-answered request with the same action is a no-op;
  a different action is a 409

Called by: main.py (router mount)
Depends on: dependencies, services/connection_service
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_company_user
from ..models import User
from ..schemas.connections import (
    ConnectionAction,
    ConnectionOut,
    ConnectionRequestCreate,
    PendingConnection,
    PendingConnectionsQuery,
    ReceivedConnection,
)
from ..services.connection_service import (
    act_on_connection,
    list_pending_connections,
    list_received_connections,
    request_connection,
)

router = APIRouter(tags=["connections"])


@router.post("/api/connection/sendrequest", status_code=201, response_model=ConnectionOut)
def send_connection_request(
    body: ConnectionRequestCreate,
    user: User = Depends(require_company_user),
    db: Session = Depends(get_db),
):
    """Send a connection request from the caller's company."""
    if body.sender_company_id != user.company_id:
        raise HTTPException(403, "Requests can only be sent as your own company")
    return request_connection(
        db, body.sender_company_id, body.receiver_company_id, body.message
    )


@router.post("/api/connection/getconnections", response_model=list[PendingConnection])
def pending_connections(
    body: PendingConnectionsQuery,
    user: User = Depends(require_company_user),
    db: Session = Depends(get_db),
):
    """Pending requests addressed to the caller's company, oldest first."""
    if body.receiver_company_id != user.company_id:
        raise HTTPException(403, "Can only list requests addressed to your company")
    return list_pending_connections(db, body.receiver_company_id)


@router.put("/api/connection/getconnections/{connection_id}", response_model=ConnectionOut)
def answer_connection(
    connection_id: int,
    body: ConnectionAction,
    user: User = Depends(require_company_user),
    db: Session = Depends(get_db),
):
    """Accept or reject a pending request addressed to the caller's company."""
    return act_on_connection(
        db, connection_id, body.action, body.replmessage, user.company_id
    )


@router.get("/api/connection/received", response_model=list[ReceivedConnection])
def received_connections(
    user: User = Depends(require_company_user),
    db: Session = Depends(get_db),
):
    """Every request addressed to the caller's company, newest first."""
    return list_received_connections(db, user.company_id)
