# app/exceptions.py
"""Error kinds raised by the conversation services.

Services raise these and never build transport responses themselves; the API
layer maps each kind to an HTTP status in ``app.main``.
"""

from typing import Optional


class ConversationError(Exception):
    """Base class for every error a service operation can raise."""

    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotAuthorizedError(ConversationError):
    """No valid principal was supplied."""

    kind = "not_authorized"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ForbiddenError(ConversationError):
    """Valid principal without the required relationship to the target."""

    kind = "forbidden"


class NotFoundError(ConversationError):
    """Referenced entity is absent (or hidden from the caller)."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class InvalidInputError(ConversationError):
    """Malformed request shape."""

    kind = "invalid_input"


class ConflictError(ConversationError):
    """Reserved for strict uniqueness enforcement of conversation identity."""

    kind = "conflict"


def require_caller(caller_id: Optional[str]) -> str:
    """Return the caller id, or raise when the request carries no principal."""
    if not caller_id or not caller_id.strip():
        raise NotAuthorizedError()
    return caller_id
