"""Type descriptors and runtime shape matching for handler results.

A type descriptor names a family of values eligible for automatic JSON
serialization. Three kinds are accepted:

- a built-in :class:`Shape` (``Shape.ARRAY``, ``Shape.MAP``)
- a Python class, matched with ``isinstance`` (e.g. ``pydantic.BaseModel``)
- a predicate ``(value) -> bool`` registered by the application

Descriptors are evaluated in configured order and the first match wins.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from autojson.core.exceptions import ConfigurationError
from autojson.core.types import ShapePredicate

type TypeDescriptor = Shape | type | ShapePredicate


class Shape(Enum):
    """Built-in value shapes.

    ``ARRAY`` and ``MAP`` are disjoint, and neither matches ``str`` or
    ``bytes`` even though both are sequences.
    """

    ARRAY = "array"
    """Ordered collections: ``list`` and ``tuple``."""

    MAP = "map"
    """Key/value collections: any ``collections.abc.Mapping``."""

    def matches(self, value: Any) -> bool:  # noqa: ANN401 - any handler result
        """Return True if ``value`` has this shape."""
        if self is Shape.ARRAY:
            return isinstance(value, list | tuple)
        return isinstance(value, Mapping)


DEFAULT_SHAPES: tuple[TypeDescriptor, ...] = (Shape.ARRAY, Shape.MAP)


def validate_descriptor(descriptor: object) -> TypeDescriptor:
    """Check that ``descriptor`` is a usable type descriptor.

    Args:
        descriptor: Candidate descriptor from the configuration surface.

    Returns:
        TypeDescriptor: The descriptor, unchanged.

    Raises:
        ConfigurationError: If the descriptor is neither a Shape, a class nor
            a callable.
    """
    if isinstance(descriptor, Shape | type) or callable(descriptor):
        return descriptor
    raise ConfigurationError(
        f"Invalid JSON result type descriptor: {descriptor!r}",
        context={"descriptor_type": type(descriptor).__name__},
    )


def descriptor_matches(descriptor: TypeDescriptor, value: Any) -> bool:  # noqa: ANN401
    """Return True if ``value`` matches a single descriptor."""
    if isinstance(descriptor, Shape):
        return descriptor.matches(value)
    if isinstance(descriptor, type):
        return isinstance(value, descriptor)
    return bool(descriptor(value))


def first_match(
    descriptors: Iterable[TypeDescriptor],
    value: Any,  # noqa: ANN401
) -> TypeDescriptor | None:
    """Return the first descriptor ``value`` matches, or None."""
    for descriptor in descriptors:
        if descriptor_matches(descriptor, value):
            return descriptor
    return None


def merge_descriptors(
    current: tuple[TypeDescriptor, ...],
    additions: Iterable[object],
) -> tuple[TypeDescriptor, ...]:
    """Union ``additions`` into ``current``, keeping first-seen order.

    Args:
        current: Descriptors already configured.
        additions: Descriptors to merge in; each one is validated.

    Returns:
        tuple[TypeDescriptor, ...]: A new tuple without duplicates.
    """
    merged = list(current)
    for descriptor in additions:
        validated = validate_descriptor(descriptor)
        if validated not in merged:
            merged.append(validated)
    return tuple(merged)


def describe(descriptor: TypeDescriptor) -> str:
    """Human-readable descriptor name for logs."""
    if isinstance(descriptor, Shape):
        return f"Shape.{descriptor.name}"
    return getattr(descriptor, "__qualname__", None) or repr(descriptor)
