"""
Gradewise - Service Errors
Raised by the service layer and mapped to HTTP responses by the routes.
"""


class ServiceError(Exception):
    """Base service error."""
    pass


class NotFoundError(ServiceError):
    """Requested entity does not exist."""
    pass


class PermissionDeniedError(ServiceError):
    """Caller may not act on this entity."""
    pass


class InvalidStateError(ServiceError):
    """Operation is not allowed in the entity's current lifecycle state."""
    pass


class ValidationError(ServiceError):
    """Payload is well-formed but violates a domain rule."""
    pass
