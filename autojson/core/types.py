"""Type aliases shared across the application.

The body-conversion chain passes arbitrary handler return values around, so
these cannot be narrowed further than ``Any``; the aliases document intent
at the seams.
"""

from collections.abc import Callable
from typing import Any

# Turns a matched handler result into JSON text
type Serializer = Callable[[Any], str]

# Application-registered shape test, evaluated against handler results
type ShapePredicate = Callable[[Any], bool]

# Response body produced by the body-conversion chain; None means "no body"
type Body = str | bytes | None
