"""Domain errors raised by the unification and write services.

The API layer maps each subclass to an HTTP status; services never raise
``HTTPException`` themselves.
"""


class BlogError(RuntimeError):
    """Base class for all domain failures."""


class NotAuthenticatedError(BlogError):
    """Raised when a write is attempted without an actor id."""


class NotFoundError(BlogError):
    """Raised when a write targets an id that resolves in neither source."""


class ForbiddenError(BlogError):
    """Raised when an actor mutates a record it does not own, or a remote record."""


class ValidationError(BlogError):
    """Raised when a required text field is empty after trimming."""


class UpstreamUnavailableError(BlogError):
    """Raised when the remote catalog fails or times out."""


class WriteConflictError(BlogError):
    """Raised when concurrent writers exhaust the retry budget."""
