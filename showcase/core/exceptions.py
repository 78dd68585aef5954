"""
Portal-wide exception hierarchy.

Services raise these types; blueprints register handlers against them once
and get consistent HTTP status codes everywhere. The client-side gateway maps
HTTP failures back onto the same types, so an editing session sees the same
errors whether it talks to the store in-process or over the network.

Usage:
    from showcase.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Submission", resource_id=42)
    raise ValidationError("Unknown field 'projct_name'", details={"projct_name": "unknown field"})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist within the caller's scope.

    Used for BOTH genuinely missing records AND submissions owned by another
    user, so a 404 never confirms that someone else's submission exists.

    Args:
        resource: Human-readable model/entity name (e.g. "Submission").
        resource_id: The PK that was looked up. Included in logs, not in HTTP response.
        owner_id: Optional — the ownership scope that was enforced. For debug logging only.
    """

    def __init__(
        self,
        resource: str,
        resource_id: int | str | None = None,
        owner_id: int | None = None,
    ) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.owner_id = owner_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        if owner_id is not None:
            msg += f" (owner={owner_id})"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when an edit or payload is unknown or malformed.

    The edit is discarded before it reaches the store; the caller's snapshot
    is left unchanged.

    Maps to HTTP 422 in blueprint error handlers.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
                 Keys are field names; values are error descriptions.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class InvalidStateError(Exception):
    """Raised when a mutation targets a completed submission or a transition is illegal.

    Maps to HTTP 409.

    Args:
        message: Human-readable explanation.
        current_status: Lifecycle status at the time of the attempt.
    """

    def __init__(self, message: str, current_status: str | None = None) -> None:
        self.current_status = current_status
        super().__init__(message)


class PersistenceError(Exception):
    """Raised when the store is unreachable or rejects a write.

    Recoverable during autosave (the next debounce cycle tries again);
    surfaced to the user for the explicit complete action.

    Maps to HTTP 503.
    """


class ConflictError(Exception):
    """Raised when an operation would create a duplicate unique constraint violation.

    Maps to HTTP 409.

    Args:
        resource: Model name.
        field: The unique field that would be duplicated.
        value: The conflicting value (truncated in HTTP response; full in logs).
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)


class AuthError(Exception):
    """Raised when a bearer credential is missing, invalid, or lacks admin rights.

    Maps to HTTP 401, or 403 when ``forbidden`` is set.
    """

    def __init__(self, message: str, *, forbidden: bool = False) -> None:
        self.forbidden = forbidden
        super().__init__(message)
