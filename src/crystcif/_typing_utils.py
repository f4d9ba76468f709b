"""Utility module for handling type checking decorators.

This module provides conditional decorators that can be disabled during
documentation builds to allow Sphinx autodoc to properly introspect functions.
"""

import os
from collections.abc import Callable
from typing import Any, TypeVar

from beartype import beartype as _beartype
from jaxtyping import jaxtyped as _jaxtyped

# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., Any])

# Check if we're building documentation
BUILDING_DOCS = os.environ.get("BUILDING_DOCS", "").lower() in (
    "1",
    "true",
    "yes",
)

if BUILDING_DOCS:
    # During documentation builds, make decorators no-ops
    def jaxtyped(typechecker: Any = None) -> Callable[[F], F]:
        """No-op decorator for documentation builds."""

        def decorator(func: F) -> F:
            return func

        return decorator

    def beartype(func: F) -> F:
        """No-op decorator for documentation builds."""
        return func

else:
    jaxtyped = _jaxtyped
    beartype = _beartype


__all__ = ["jaxtyped", "beartype", "BUILDING_DOCS"]
