"""Application-wide configuration for automatic JSON results.

The store holds the set of eligible type descriptors and the single active
serializer. It is filled while the application is being set up, possibly by
several independent ``configure`` calls, and frozen before the first request
is served. From then on the immutable :class:`JsonResultConfig` value is
shared read-only by every request.

Merge rules:
- **classes**: set union, duplicates dropped, first-seen order kept
- **serializer**: replaced outright by the latest call
"""

from collections.abc import Iterable, Mapping
from typing import Any

import orjson
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from autojson.core.config import JsonConfig
from autojson.core.exceptions import ConfigurationError, ConfigurationFrozenError
from autojson.core.shapes import (
    DEFAULT_SHAPES,
    TypeDescriptor,
    describe,
    first_match,
    merge_descriptors,
)
from autojson.core.types import Serializer


def _coerce(value: Any) -> Any:  # noqa: ANN401 - orjson default hook
    # orjson only encodes exact dict/list/tuple; other eligible shapes are copied
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, tuple):
        return list(value)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def _dumps(value: Any, option: int | None = None) -> str:  # noqa: ANN401 - any matched result
    return orjson.dumps(value, default=_coerce, option=option).decode("utf-8")


def default_serializer(value: Any) -> str:  # noqa: ANN401 - any matched result
    """Serialize ``value`` to compact JSON text with orjson.

    Pydantic models are dumped to plain data, other mappings and tuple
    subclasses such as named tuples are copied to ``dict`` and ``list``.
    ``datetime``, ``UUID`` and dataclass values are handled natively by orjson.

    Raises:
        orjson.JSONEncodeError: If the value holds a non-serializable member.
    """
    return _dumps(value)


def build_serializer(json_config: JsonConfig) -> Serializer:
    """Return the default serializer tuned by the application's JSON settings."""
    if not json_config.sort_keys:
        return default_serializer

    def sorted_serializer(value: Any) -> str:  # noqa: ANN401
        return _dumps(value, option=orjson.OPT_SORT_KEYS)

    return sorted_serializer


class JsonResultConfig(BaseModel):
    """Immutable snapshot of the eligible types and the active serializer."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    classes: tuple[Any, ...] = ()
    serializer: Serializer = Field(default=default_serializer)

    def eligible_types(self) -> tuple[TypeDescriptor, ...]:
        """Return the configured descriptors in evaluation order."""
        return self.classes

    def match(self, value: Any) -> TypeDescriptor | None:  # noqa: ANN401
        """Return the first descriptor ``value`` matches, or None."""
        return first_match(self.classes, value)

    def serialize(self, value: Any) -> str:  # noqa: ANN401
        """Run the active serializer; its exceptions propagate unchanged."""
        return self.serializer(value)


class JsonResultStore:
    """Per-application holder of the :class:`JsonResultConfig`.

    Mutable only until :meth:`freeze` is called. Once frozen every
    :meth:`configure` call raises :class:`ConfigurationFrozenError`.
    """

    def __init__(self, default: Serializer = default_serializer) -> None:
        self._default_serializer = default
        self._config = JsonResultConfig(serializer=default)
        self._frozen = False

    @property
    def config(self) -> JsonResultConfig:
        """The current configuration value."""
        return self._config

    @property
    def frozen(self) -> bool:
        """Whether the store still accepts configuration."""
        return self._frozen

    def configure(
        self,
        classes: Iterable[object] | None = None,
        serializer: Serializer | None = None,
    ) -> JsonResultConfig:
        """Merge eligible classes and replace the serializer.

        Args:
            classes: Type descriptors to add. Defaults to array and map shapes.
            serializer: Callable turning a matched value into JSON text.
                Defaults to the store's default serializer.

        Returns:
            JsonResultConfig: The configuration after the merge.

        Raises:
            ConfigurationFrozenError: If the store has already been frozen.
            ConfigurationError: If a descriptor or the serializer is invalid.
        """
        if self._frozen:
            raise ConfigurationFrozenError(
                "JSON result configuration cannot change after the "
                "application has started serving requests"
            )

        additions = DEFAULT_SHAPES if classes is None else tuple(classes)
        if serializer is not None and not callable(serializer):
            raise ConfigurationError(
                "JSON result serializer must be callable",
                context={"serializer_type": type(serializer).__name__},
            )

        self._config = self._config.model_copy(
            update={
                "classes": merge_descriptors(self._config.classes, additions),
                "serializer": (
                    self._default_serializer if serializer is None else serializer
                ),
            }
        )

        logger.info(
            "JSON result classes configured: {}",
            ", ".join(describe(d) for d in self._config.classes),
            custom_serializer=serializer is not None,
        )
        return self._config

    def freeze(self) -> JsonResultConfig:
        """Freeze the store and return its final configuration. Idempotent."""
        if not self._frozen:
            self._frozen = True
            logger.debug(
                "JSON result configuration frozen with {} eligible types",
                len(self._config.classes),
            )
        return self._config

    def eligible_types(self) -> tuple[TypeDescriptor, ...]:
        """Return the eligible type descriptors. No side effects."""
        return self._config.eligible_types()

    def serialize(self, value: Any) -> str:  # noqa: ANN401
        """Serialize ``value`` with the active serializer."""
        return self._config.serialize(value)
