"""Shared rate limiter (per client address, in-process storage).

Limits are per worker process; the search endpoint is the only limited
route.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)
