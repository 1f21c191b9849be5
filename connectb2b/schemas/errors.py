"""
schemas/errors.py — Structured error response model

Shared by every exception handler in main.py. `code` is stable and
machine-readable; `error` is a generic human message.
"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    code: str
    status_code: int
    request_id: str = ""
    detail: list | None = None
