"""Unit tests for the ORJSONResponse class."""

from typing import Any

import orjson
import pytest
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pytest_mock import MockerFixture

from autojson.api.utils.responses import ORJSONResponse


class Payload(BaseModel):
    """Model rendered by the response class."""

    name: str
    count: int


@pytest.mark.unit
class TestORJSONResponse:
    """Test suite for ORJSONResponse class."""

    def test_initialization(self) -> None:
        """ORJSONResponse is a JSONResponse with the JSON media type."""
        response = ORJSONResponse(content={"test": "data"})

        assert response.media_type == "application/json"
        assert isinstance(response, JSONResponse)
        assert response.headers["content-type"] == "application/json"

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ({}, b"{}"),
            ({"key": "value"}, b'{"key":"value"}'),
            ([1, 2, 3], b"[1,2,3]"),
            ({"unicode": "café"}, '{"unicode":"café"}'.encode()),
            (None, b"null"),
        ],
    )
    def test_render(self, content: Any, expected: bytes) -> None:
        """Content is rendered as compact UTF-8 JSON."""
        assert ORJSONResponse(content=content).body == expected

    def test_render_pydantic_model(self) -> None:
        """Pydantic models are dumped before encoding."""
        response = ORJSONResponse(content=Payload(name="a", count=1))

        assert orjson.loads(response.body) == {"name": "a", "count": 1}

    def test_render_uses_default_serializer(self, mocker: MockerFixture) -> None:
        """Rendering delegates to the shared default serializer."""
        mock_serializer = mocker.patch(
            "autojson.api.utils.responses.default_serializer",
            return_value='{"mocked":true}',
        )

        response = ORJSONResponse(content={"a": 1})

        mock_serializer.assert_called_once_with({"a": 1})
        assert response.body == b'{"mocked":true}'
