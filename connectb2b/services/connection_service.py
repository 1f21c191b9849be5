"""Connection service — lifecycle of a directed connection request.

States: pending → accepted | rejected. Both outcomes are terminal: the
receiver answers once, and re-sending the same answer is a no-op.

Business Rules:
- One edge per ordered (sender, receiver) pair; a second request for the
  same pair is a DuplicateRequest whatever the first one's state
- Only the receiver may accept or reject
- status and constatus change in one conditional UPDATE, so a double-submit
  cannot leave them disagreeing
- Two companies count as connected when an accepted edge exists in either
  direction (is_connected); status_of stays directional

Usage:
    edge = request_connection(db, sender_id, receiver_id, "Hello")
    edge = act_on_connection(db, edge.id, "Accept", "Welcome", actor_company_id=receiver_id)
    is_connected(db, receiver_id, sender_id)  # True
"""

import logging

from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import (
    DuplicateRequest,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from ..models import Company, Connection, ConnectionStatus, constatus_for
from ..models.base import utcnow
from ..models.directory import COMPANY_ACTIVE
from ..utils.store_retry import read_with_retry, store_write_guard

log = logging.getLogger("connectb2b.connections")

ACTIONS = {
    "accept": ConnectionStatus.ACCEPTED,
    "accepted": ConnectionStatus.ACCEPTED,
    "reject": ConnectionStatus.REJECTED,
    "rejected": ConnectionStatus.REJECTED,
}


def parse_action(action: str | None) -> ConnectionStatus:
    """Map a receiver's action (Accept / Reject, any case) to its target state."""
    target = ACTIONS.get((action or "").strip().lower())
    if target is None:
        raise ValidationError("Action must be Accept or Reject")
    return target


def _active_company(db: Session, company_id: int) -> Company | None:
    company = db.get(Company, company_id)
    if not company or company.status != COMPANY_ACTIVE:
        return None
    return company


# ═══════════════════════════════════════════════════════════════════════
#  TRANSITIONS
# ═══════════════════════════════════════════════════════════════════════


def request_connection(
    db: Session, sender_id: int, receiver_id: int, message: str | None = None
) -> Connection:
    """Create a pending edge from sender to receiver."""
    if sender_id == receiver_id:
        raise ValidationError("A company cannot connect to itself")
    for cid in (sender_id, receiver_id):
        if not _active_company(db, cid):
            raise NotFound(f"Company {cid} not found")

    existing = (
        db.query(Connection)
        .filter_by(sender_company_id=sender_id, receiver_company_id=receiver_id)
        .first()
    )
    if existing:
        raise DuplicateRequest()

    edge = Connection(
        sender_company_id=sender_id,
        receiver_company_id=receiver_id,
        status=ConnectionStatus.PENDING,
        message=message,
    )
    try:
        with store_write_guard(db):
            db.add(edge)
            db.commit()
    except IntegrityError:
        # Lost a race with a concurrent request for the same pair
        raise DuplicateRequest()
    db.refresh(edge)
    log.info(
        "Connection requested: %d -> %d (edge %d)", sender_id, receiver_id, edge.id
    )
    return edge


def act_on_connection(
    db: Session,
    connection_id: int,
    action: str,
    reply_message: str | None,
    actor_company_id: int,
) -> Connection:
    """Accept or reject a pending edge on behalf of its receiver.

    Idempotent: repeating the answer the edge already holds returns it
    unchanged (the first reply message is kept).
    """
    target = parse_action(action)

    stmt = (
        update(Connection)
        .where(
            Connection.id == connection_id,
            Connection.receiver_company_id == actor_company_id,
            Connection.status == ConnectionStatus.PENDING.value,
        )
        .values(
            status=target.value,
            constatus=constatus_for(target),
            reply_message=reply_message,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    with store_write_guard(db):
        result = db.execute(stmt)
        db.commit()

    edge = db.get(Connection, connection_id)
    if edge is not None:
        db.refresh(edge)

    if result.rowcount == 1:
        log.info("Connection %d %s by company %d", connection_id, target.value, actor_company_id)
        return edge

    if edge is None:
        raise NotFound(f"Connection {connection_id} not found")
    if edge.receiver_company_id != actor_company_id:
        raise PermissionDenied("Only the receiving company can answer this request")
    if edge.status == target.value:
        log.info("Connection %d already %s — no-op", connection_id, target.value)
        return edge
    raise InvalidTransition(f"Connection request is already {edge.status}")


# ═══════════════════════════════════════════════════════════════════════
#  QUERIES
# ═══════════════════════════════════════════════════════════════════════


def status_of(db: Session, company_a: int, company_b: int) -> ConnectionStatus | None:
    """Status of the edge sent by company_a to company_b (directional)."""
    edge = (
        db.query(Connection.status)
        .filter_by(sender_company_id=company_a, receiver_company_id=company_b)
        .first()
    )
    return ConnectionStatus(edge[0]) if edge else None


def connected_company_ids(db: Session, company_id: int, candidates) -> set[int]:
    """Which candidates share an accepted edge with company_id, in either direction."""
    ids = list(set(candidates))
    if not ids:
        return set()
    rows = (
        db.query(Connection.sender_company_id, Connection.receiver_company_id)
        .filter(
            Connection.status == ConnectionStatus.ACCEPTED.value,
            or_(
                and_(
                    Connection.receiver_company_id == company_id,
                    Connection.sender_company_id.in_(ids),
                ),
                and_(
                    Connection.sender_company_id == company_id,
                    Connection.receiver_company_id.in_(ids),
                ),
            ),
        )
        .all()
    )
    return {s if r == company_id else r for s, r in rows}


def is_connected(db: Session, company_a: int, company_b: int) -> bool:
    return company_b in read_with_retry(db, connected_company_ids, company_a, [company_b])


def _pending_rows(db: Session, receiver_id: int):
    return (
        db.query(Connection, Company.name)
        .join(Company, Connection.sender_company_id == Company.id)
        .filter(
            Connection.receiver_company_id == receiver_id,
            Connection.status == ConnectionStatus.PENDING.value,
        )
        .order_by(Connection.created_at.asc(), Connection.id.asc())
        .all()
    )


def list_pending_connections(db: Session, receiver_id: int) -> list[dict]:
    """Pending requests addressed to receiver_id, oldest first."""
    rows = read_with_retry(db, _pending_rows, receiver_id)
    return [
        {
            "id": edge.id,
            "sender_company_id": edge.sender_company_id,
            "name": sender_name,
            "message": edge.message,
            "sendon": edge.created_at.strftime("%d-%b-%y") if edge.created_at else None,
            "created_at": edge.created_at.isoformat() if edge.created_at else None,
        }
        for edge, sender_name in rows
    ]


def _received_rows(db: Session, receiver_id: int):
    return (
        db.query(Connection, Company)
        .join(Company, Connection.sender_company_id == Company.id)
        .filter(Connection.receiver_company_id == receiver_id)
        .order_by(Connection.created_at.desc(), Connection.id.desc())
        .all()
    )


def list_received_connections(db: Session, receiver_id: int) -> list[dict]:
    """Every request addressed to receiver_id, newest first (dashboard view)."""
    rows = read_with_retry(db, _received_rows, receiver_id)
    return [
        {
            "id": edge.id,
            "sender_company_id": sender.id,
            "cname": sender.name,
            "contact": sender.contact,
            "status": edge.status,
            "connected": edge.constatus == "Y",
        }
        for edge, sender in rows
    ]
