"""
errors.py — Directory error taxonomy

Every failure the core reports to a caller is a DirectoryError subclass
with a stable machine code, an HTTP status and a generic public message.
Internal detail (raw store errors, SQL) stays in the logs; main.py renders
only `code` and `public_message`.

Business Rules:
- ValidationError / NotFound / DuplicateRequest / InvalidTransition /
  PermissionDenied are caller errors: reported, never retried
- StoreUnavailable is transient: read paths retry before raising it
- AuditWriteFailed never reaches a caller; the audit log swallows it

Called by: services/*, utils/store_retry.py, main.py (exception handler)
Depends on: nothing
"""


class DirectoryError(Exception):
    code = "directory_error"
    status_code = 500
    default_message = "Request failed"
    retryable = False

    def __init__(self, public_message: str | None = None, *, detail: str | None = None):
        self.public_message = public_message or self.default_message
        self.detail = detail
        super().__init__(detail or self.public_message)


class ValidationError(DirectoryError):
    code = "validation_error"
    status_code = 400
    default_message = "Invalid request"


class PermissionDenied(DirectoryError):
    code = "forbidden"
    status_code = 403
    default_message = "Not allowed for this company"


class NotFound(DirectoryError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class DuplicateRequest(DirectoryError):
    code = "duplicate_request"
    status_code = 409
    default_message = "A connection request already exists for these companies"


class InvalidTransition(DirectoryError):
    code = "invalid_transition"
    status_code = 409
    default_message = "Connection request has already been answered"


class StoreUnavailable(DirectoryError):
    code = "store_unavailable"
    status_code = 503
    default_message = "Service temporarily unavailable, try again shortly"
    retryable = True


class AuditWriteFailed(DirectoryError):
    code = "audit_write_failed"
    default_message = "Search audit record could not be written"
