"""Result interceptor turning eligible handler results into JSON bodies.

The interceptor is one link in the body-conversion chain. For every handler
result it makes a single decision:

- **Matched**: the value's shape is in the eligible type set. The response
  gets ``Content-Type: application/json`` and the body is the serializer's
  output. The rest of the chain is never consulted, including when the
  serializer fails.
- **Unmatched**: the value goes to ``call_next`` and its result is returned
  unchanged, with no side effects from this interceptor.
"""

from typing import Any

from loguru import logger

from autojson.api.chain import NextConverter, ResponseContext
from autojson.core.constants import APPLICATION_JSON, CONTENT_TYPE_HEADER
from autojson.core.result_config import JsonResultStore
from autojson.core.shapes import describe
from autojson.core.types import Body


class JsonResultInterceptor:
    """Body converter serializing eligible results as JSON.

    Args:
        store: The application's JSON result config store. Its current
            immutable configuration is read on every request; freezing it
            is left to application startup.
    """

    def __init__(self, store: JsonResultStore) -> None:
        self.store = store

    def intercept(
        self,
        value: Any,  # noqa: ANN401 - any handler result
        response: ResponseContext,
        call_next: NextConverter,
    ) -> Body:
        """Serialize ``value`` as JSON if eligible, otherwise delegate.

        Args:
            value: The route handler's return value.
            response: Per-request response state.
            call_next: Continuation running the rest of the chain.

        Returns:
            Body: The JSON text on match, or whatever ``call_next`` returned.
        """
        config = self.store.config

        descriptor = config.match(value)
        if descriptor is None:
            return call_next(value)

        response.headers[CONTENT_TYPE_HEADER] = APPLICATION_JSON
        body = config.serialize(value)
        logger.debug(
            "Serialized {} result as JSON",
            type(value).__name__,
            matched=describe(descriptor),
        )
        return body

    __call__ = intercept
