"""JSON response class for responses the application builds itself.

Handler results go through the body-conversion chain; error handlers and
other framework-level responses use :class:`ORJSONResponse` so both paths
encode JSON the same way.
"""

from typing import Any

from fastapi.responses import JSONResponse

from autojson.core.constants import APPLICATION_JSON
from autojson.core.result_config import default_serializer


class ORJSONResponse(JSONResponse):
    """FastAPI response class encoding content with the default serializer."""

    media_type = APPLICATION_JSON

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON bytes.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        return default_serializer(content).encode("utf-8")
