"""Constrain connections to one edge per pair and a consistent constatus

Revision ID: 002_connection_constraints
Revises: 001_initial
Create Date: 2026-10-19

Databases stamped at 001_initial from the legacy schema lack the
constraints the ORM declares. The legacy API stored whatever action label
the receiver sent, so labels are normalised first: accept labels become
'accepted', 'pending' (any case) or an empty status stays 'pending', every
other label was a refusal and becomes 'rejected'. Self-edges are removed,
duplicate edges for the same ordered pair collapse onto the one carrying the
most meaningful state (accepted > rejected > pending, then newest), then the
unique and CHECK constraints are added.
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002_connection_constraints"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NORMALIZE_STATUS = (
    """
    UPDATE connections SET status = 'accepted', constatus = 'Y'
    WHERE lower(trim(status)) IN ('accept', 'accepted')
    """,
    """
    UPDATE connections SET status = 'pending', constatus = 'N'
    WHERE status IS NULL OR lower(trim(status)) IN ('', 'pending')
    """,
    """
    UPDATE connections SET status = 'rejected', constatus = 'N'
    WHERE status NOT IN ('accepted', 'pending')
    """,
)

DELETE_SELF_EDGES = """
    DELETE FROM connections WHERE sender_company_id = receiver_company_id
"""

# Keep one edge per ordered pair: accepted over rejected over pending, then newest
COLLAPSE_DUPLICATE_EDGES = """
    DELETE FROM connections
    WHERE id <> (
        SELECT keep.id FROM connections keep
        WHERE keep.sender_company_id = connections.sender_company_id
          AND keep.receiver_company_id = connections.receiver_company_id
        ORDER BY CASE keep.status
                     WHEN 'accepted' THEN 0
                     WHEN 'rejected' THEN 1
                     ELSE 2
                 END,
                 keep.id DESC
        LIMIT 1
    )
"""


def upgrade() -> None:
    for stmt in NORMALIZE_STATUS:
        op.execute(stmt)
    op.execute(DELETE_SELF_EDGES)
    op.execute(COLLAPSE_DUPLICATE_EDGES)
    op.create_unique_constraint(
        "uq_connections_pair", "connections", ["sender_company_id", "receiver_company_id"]
    )
    op.create_check_constraint(
        "ck_connections_status", "connections",
        "status IN ('pending', 'accepted', 'rejected')",
    )
    op.create_check_constraint(
        "ck_connections_constatus", "connections",
        "(status = 'accepted' AND constatus = 'Y') OR (status <> 'accepted' AND constatus = 'N')",
    )
    op.create_check_constraint(
        "ck_connections_not_self", "connections",
        "sender_company_id <> receiver_company_id",
    )


def downgrade() -> None:
    op.drop_constraint("ck_connections_not_self", "connections", type_="check")
    op.drop_constraint("ck_connections_constatus", "connections", type_="check")
    op.drop_constraint("ck_connections_status", "connections", type_="check")
    op.drop_constraint("uq_connections_pair", "connections", type_="unique")
