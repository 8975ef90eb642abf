# classroll/core/errors.py
"""Error kinds raised by the scheduling and presence core.

The core never builds HTTP responses; ``classroll.main`` maps each kind to a
status code.
"""


class DomainError(Exception):
    kind = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(DomainError):
    """Malformed input, empty program set or a missing referenced entity."""

    kind = "validation"


class NotFoundError(DomainError):
    kind = "not_found"


class ConflictError(DomainError):
    """Temporal clash, duplicate unique key or an illegal state transition."""

    kind = "conflict"


class AuthorizationError(DomainError):
    kind = "authorization"
