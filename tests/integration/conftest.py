"""Shared fixtures for integration tests."""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from autojson.api.main import create_app
from autojson.core.config import get_settings
from autojson.core.result_config import default_serializer


class Order(BaseModel):
    """Model registered as an extra JSON result class."""

    id: int
    total: float


def _add_result_endpoints(app: FastAPI) -> None:
    """Routes returning each kind of handler result."""

    @app.get("/results/array")
    async def array() -> list[int]:
        return [1, 2, 3]

    @app.get("/results/map")
    async def mapping() -> dict[str, str]:
        return {"a": "b"}

    @app.get("/results/text")
    async def text() -> str:
        return "hello"

    @app.get("/results/nothing")
    async def nothing() -> None:
        return None

    @app.get("/results/order")
    async def order() -> Order:
        return Order(id=1, total=9.5)

    @app.get("/results/set")
    async def unsupported() -> Any:  # noqa: ANN401
        return {1, 2}

    @app.get("/results/unserializable")
    async def unserializable() -> dict[str, Any]:
        return {"handle": object()}


@pytest.fixture
def build_app() -> Callable[..., FastAPI]:
    """Factory for applications with the result test routes."""

    def _build(**kwargs: Any) -> FastAPI:  # noqa: ANN401
        application = create_app(get_settings(), **kwargs)
        _add_result_endpoints(application)
        return application

    return _build


@pytest.fixture
def app(build_app: Callable[..., FastAPI]) -> FastAPI:
    """Application with the default JSON result configuration."""
    return build_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client bound to the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as async_client:
        yield async_client


@pytest.fixture
def wrapped_serializer() -> Callable[[Any], str]:
    """Custom serializer wrapping the default output."""

    def _serialize(value: Any) -> str:  # noqa: ANN401
        return "<wrapped>" + default_serializer(value) + "</wrapped>"

    return _serialize
