"""Body-conversion chain for handler return values.

Each route handler's return value is converted into a response body by an
ordered list of converters. A converter receives the value, the per-request
:class:`ResponseContext` and ``call_next``, the continuation that runs the
rest of the chain. It either produces the body itself or returns whatever
``call_next(value)`` returns. The chain always ends with the host's default
conversion, :func:`default_body_converter`.

Converters run in registration order. Registration is a setup-time
operation: the chain is frozen when the application starts serving.
"""

from collections.abc import Callable
from typing import Any, Protocol

from fastapi import status
from starlette.datastructures import MutableHeaders
from starlette.responses import Response

from autojson.core.exceptions import ConfigurationFrozenError, UnsupportedResultError
from autojson.core.types import Body


class ResponseContext:
    """Mutable response state for a single request.

    Owned by the request pipeline; converters only set headers, the status
    code, or the body. Never shared between requests.
    """

    def __init__(self, status_code: int = status.HTTP_200_OK) -> None:
        self.status_code = status_code
        self.headers = MutableHeaders()
        self.body: Body = None

    def to_response(self, default_media_type: str | None = None) -> Response:
        """Build the Starlette response.

        Args:
            default_media_type: Content type used only when no converter set
                a ``Content-Type`` header.

        Returns:
            Response: Response carrying the context's status, headers and body.
        """
        return Response(
            content=self.body if self.body is not None else b"",
            status_code=self.status_code,
            headers=dict(self.headers),
            media_type=default_media_type,
        )


class NextConverter(Protocol):
    """Continuation that runs the remainder of the chain."""

    def __call__(self, value: Any, /) -> Body:  # noqa: ANN401
        """Convert ``value`` using the remaining converters."""
        ...


class BodyConverter(Protocol):
    """One link in the body-conversion chain."""

    def __call__(
        self,
        value: Any,  # noqa: ANN401
        response: ResponseContext,
        call_next: NextConverter,
        /,
    ) -> Body:
        """Convert ``value`` or delegate to ``call_next``."""
        ...


type TerminalConverter = Callable[[Any, ResponseContext], Body]


def default_body_converter(value: Any, response: ResponseContext) -> Body:  # noqa: ANN401
    """Host default conversion at the end of every chain.

    Strings and bytes are used as the body unchanged. ``None`` means the
    handler produced nothing: the body stays empty and the status becomes 404.

    Raises:
        UnsupportedResultError: For any other value.
    """
    if isinstance(value, str | bytes):
        return value
    if value is None:
        response.status_code = status.HTTP_404_NOT_FOUND
        return None
    raise UnsupportedResultError(
        f"Unsupported handler result: {type(value).__name__}",
        context={"result_type": type(value).__name__},
    )


class ConverterChain:
    """Ordered, continuation-passing list of body converters."""

    def __init__(self, default: TerminalConverter = default_body_converter) -> None:
        self._converters: list[BodyConverter] = []
        self._default = default
        self._frozen = False

    @property
    def converters(self) -> tuple[BodyConverter, ...]:
        """Registered converters in evaluation order."""
        return tuple(self._converters)

    @property
    def frozen(self) -> bool:
        """Whether the chain still accepts registrations."""
        return self._frozen

    def register(self, converter: BodyConverter) -> None:
        """Append ``converter`` to the chain.

        Raises:
            ConfigurationFrozenError: If the chain has already been frozen.
        """
        if self._frozen:
            raise ConfigurationFrozenError(
                "Body converters cannot be registered after the application "
                "has started serving requests"
            )
        self._converters.append(converter)

    def freeze(self) -> None:
        """Forbid further registrations. Idempotent."""
        self._frozen = True

    def convert(self, value: Any, response: ResponseContext) -> Body:  # noqa: ANN401
        """Run ``value`` through the chain and return the resulting body."""
        converters = tuple(self._converters)

        def link(index: int) -> NextConverter:
            if index == len(converters):
                return lambda item: self._default(item, response)
            return lambda item: converters[index](item, response, link(index + 1))

        return link(0)(value)

    def respond(
        self,
        value: Any,  # noqa: ANN401
        default_media_type: str | None = None,
        status_code: int = status.HTTP_200_OK,
    ) -> Response:
        """Convert a handler result into a complete response.

        Results that already are responses are returned untouched.

        Args:
            value: The route handler's return value.
            default_media_type: Content type for bodies no converter typed.
            status_code: Initial status, which converters may still change.
        """
        if isinstance(value, Response):
            return value
        response = ResponseContext(status_code)
        response.body = self.convert(value, response)
        return response.to_response(default_media_type)
