"""Request-scoped context: correlation IDs for log and error correlation."""

import uuid
from contextvars import ContextVar, Token

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


class RequestContext:
    """Async-safe access to the current request's correlation ID."""

    @staticmethod
    def set_correlation_id(correlation_id: str) -> Token[str | None]:
        """Set the correlation ID for the current context.

        Args:
            correlation_id: The correlation ID to store in the context.

        Returns:
            Token[str | None]: Token that restores the previous value on reset.
        """
        return _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context."""
        return _correlation_id_var.get()

    @staticmethod
    def reset(token: Token[str | None]) -> None:
        """Restore the correlation ID that was active before ``token`` was issued."""
        _correlation_id_var.reset(token)

    @staticmethod
    def clear() -> None:
        """Drop the correlation ID from the current context."""
        _correlation_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique ID for a single request, in the form ``req-<uuid4>``."""
    return f"req-{uuid.uuid4()}"
