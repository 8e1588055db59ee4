"""Wiring of the JSON results plugin into a FastAPI application.

Installation happens at application setup time and may be repeated, e.g.
once per plugin that wants extra classes serialized::

    app = FastAPI()
    install_json_results(app)
    install_json_results(app, classes=[BaseModel])

    @app.get("/items")
    async def items() -> list[int]:
        return [1, 2, 3]

Routes declared after the first installation use a route class that sends
handler return values through the application's body-conversion chain.
Routers included from elsewhere should be created with
``APIRouter(route_class=result_route_class(converter_chain(app)))``.
"""

import functools
import inspect
from collections.abc import Callable, Iterable
from typing import Any

from fastapi import FastAPI, Response, status
from fastapi.routing import APIRoute
from loguru import logger

from autojson.api.chain import ConverterChain
from autojson.api.constants import DEFAULT_MEDIA_TYPE
from autojson.api.interceptor import JsonResultInterceptor
from autojson.core.result_config import JsonResultStore
from autojson.core.shapes import TypeDescriptor
from autojson.core.types import Serializer

CHAIN_STATE_KEY = "body_converters"
STORE_STATE_KEY = "json_results"
SUB_RESPONSE_PARAM = "autojson_sub_response"


def _sub_response_name(signature: inspect.Signature) -> str | None:
    """Return the name of the handler's own ``Response`` parameter, if any."""
    for parameter in signature.parameters.values():
        annotation = parameter.annotation
        if isinstance(annotation, type) and issubclass(annotation, Response):
            return parameter.name
    return None


def _with_sub_response(signature: inspect.Signature) -> inspect.Signature:
    """Add a keyword-only ``Response`` parameter FastAPI fills in per request."""
    parameters = list(signature.parameters.values())
    position = len(parameters)
    if parameters and parameters[-1].kind is inspect.Parameter.VAR_KEYWORD:
        position -= 1
    parameters.insert(
        position,
        inspect.Parameter(
            SUB_RESPONSE_PARAM, inspect.Parameter.KEYWORD_ONLY, annotation=Response
        ),
    )
    return signature.replace(parameters=parameters)


def _wrap_endpoint(
    endpoint: Callable[..., Any],
    chain: ConverterChain,
    default_media_type: str | None,
    status_code: int | None = None,
) -> Callable[..., Any]:
    """Wrap ``endpoint`` so its return value goes through ``chain``.

    The wrapper always receives FastAPI's per-request sub-response, the one
    handlers and dependencies see when they declare a ``Response`` parameter.
    Its status code and headers are carried onto the converted response, as
    FastAPI does for results it serializes itself. ``status_code`` is the
    route's declared status, used when the sub-response has none.

    FastAPI inspects the wrapper itself, so ``__wrapped__`` is removed and
    the amended signature is the one it sees.
    """
    signature = inspect.signature(endpoint, eval_str=True)
    sub_response_name = _sub_response_name(signature)
    if sub_response_name is None:
        signature = _with_sub_response(signature)

    def take_sub_response(kwargs: dict[str, Any]) -> Response:
        if sub_response_name is None:
            return kwargs.pop(SUB_RESPONSE_PARAM)
        return kwargs[sub_response_name]

    def finish(result: Any, sub_response: Response) -> Response:  # noqa: ANN401
        initial_status = sub_response.status_code or status_code or status.HTTP_200_OK
        response = chain.respond(result, default_media_type, initial_status)
        if response is not result:
            response.headers.raw.extend(sub_response.headers.raw)
        return response

    if inspect.iscoroutinefunction(endpoint):

        @functools.wraps(endpoint)
        async def async_endpoint(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
            sub_response = take_sub_response(kwargs)
            return finish(await endpoint(*args, **kwargs), sub_response)

        async_endpoint.__signature__ = signature  # type: ignore[attr-defined]
        del async_endpoint.__wrapped__
        return async_endpoint

    @functools.wraps(endpoint)
    def sync_endpoint(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        sub_response = take_sub_response(kwargs)
        return finish(endpoint(*args, **kwargs), sub_response)

    sync_endpoint.__signature__ = signature  # type: ignore[attr-defined]
    del sync_endpoint.__wrapped__
    return sync_endpoint


def result_route_class(
    chain: ConverterChain,
    default_media_type: str | None = DEFAULT_MEDIA_TYPE,
) -> type[APIRoute]:
    """Build an ``APIRoute`` subclass bound to ``chain``.

    Args:
        chain: Body-conversion chain handler results are passed through.
        default_media_type: Content type for bodies no converter has typed.

    Returns:
        type[APIRoute]: Route class for ``FastAPI``/``APIRouter``.
    """

    class ResultRoute(APIRoute):
        """Route whose handler results are converted by the body chain."""

        def __init__(
            self,
            path: str,
            endpoint: Callable[..., Any],
            **kwargs: Any,  # noqa: ANN401
        ) -> None:
            wrapped = _wrap_endpoint(
                endpoint, chain, default_media_type, kwargs.get("status_code")
            )
            super().__init__(path, wrapped, **kwargs)

    return ResultRoute


def converter_chain(
    app: FastAPI,
    default_media_type: str | None = DEFAULT_MEDIA_TYPE,
) -> ConverterChain:
    """Return the application's body-conversion chain, creating it if needed.

    Creating the chain switches ``app.router`` to a route class bound to it,
    so only routes declared afterwards are affected.
    """
    chain: ConverterChain | None = getattr(app.state, CHAIN_STATE_KEY, None)
    if chain is None:
        chain = ConverterChain()
        setattr(app.state, CHAIN_STATE_KEY, chain)
        app.router.route_class = result_route_class(chain, default_media_type)
    return chain


def install_json_results(
    app: FastAPI,
    classes: Iterable[TypeDescriptor] | None = None,
    serializer: Serializer | None = None,
    *,
    default_serializer: Serializer | None = None,
) -> JsonResultStore:
    """Install or reconfigure automatic JSON results on ``app``.

    The first call creates the application's store and registers a
    :class:`JsonResultInterceptor` in its chain; every call merges
    ``classes`` and replaces the serializer.

    Args:
        app: The FastAPI application being set up.
        classes: Type descriptors to add. Defaults to array and map shapes.
        serializer: Serializer replacing the active one.
        default_serializer: Serializer used when ``serializer`` is omitted.
            Only honoured on the first call.

    Returns:
        JsonResultStore: The application's store.

    Raises:
        ConfigurationFrozenError: If the application already started serving.
    """
    store: JsonResultStore | None = getattr(app.state, STORE_STATE_KEY, None)
    if store is None:
        store = (
            JsonResultStore()
            if default_serializer is None
            else JsonResultStore(default_serializer)
        )
        converter_chain(app).register(JsonResultInterceptor(store))
        setattr(app.state, STORE_STATE_KEY, store)
        logger.info("JSON results plugin installed")

    store.configure(classes=classes, serializer=serializer)
    return store


def eligible_json_types(app: FastAPI) -> tuple[TypeDescriptor, ...]:
    """Return the types ``app`` serializes automatically.

    Empty when the plugin is not installed.
    """
    store: JsonResultStore | None = getattr(app.state, STORE_STATE_KEY, None)
    return store.eligible_types() if store is not None else ()


def freeze_json_results(app: FastAPI) -> None:
    """Freeze the application's JSON result config and converter chain."""
    store: JsonResultStore | None = getattr(app.state, STORE_STATE_KEY, None)
    if store is not None:
        store.freeze()
    chain: ConverterChain | None = getattr(app.state, CHAIN_STATE_KEY, None)
    if chain is not None:
        chain.freeze()
    logger.info(
        "JSON result configuration frozen",
        eligible_types=len(eligible_json_types(app)),
    )
