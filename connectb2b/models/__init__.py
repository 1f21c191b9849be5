"""Database models — re-exports all models.

Import from here:  from connectb2b.models import Company, Connection, ...
Or from submodules: from connectb2b.models.connections import ConnectionStatus
"""

from .base import Base  # noqa: F401

# Identity
from .auth import User  # noqa: F401

# Directory: companies, attributes, reference data
from .directory import (  # noqa: F401
    CategoryMaster,
    Company,
    CompanyLocation,
    CompanySubcategory,
    Location,
    Personnel,
    TurnoverBand,
)

# Connections
from .connections import Connection, ConnectionStatus, constatus_for  # noqa: F401

# Search audit
from .audit import SearchCriteriaLog  # noqa: F401
