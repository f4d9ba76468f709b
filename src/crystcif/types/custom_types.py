"""
Module: types.custom_types
--------------------------
Type aliases shared across the package.

Type Aliases
------------
- `scalar_float`:
    Union type for scalar float values (float or JAX scalar array)
- `scalar_num`:
    Union type for scalar numeric values (int, float, or JAX scalar array)
- `array_like`:
    Anything that `jnp.asarray` accepts for coordinate input: JAX arrays,
    NumPy arrays or (nested) Python sequences
"""

import numpy as np
from beartype.typing import Any, Sequence, Union
from jaxtyping import Array, Float, Num

scalar_float = Union[float, Float[Array, ""]]
scalar_num = Union[int, float, Num[Array, ""]]
array_like = Union[Num[Array, "..."], Num[np.ndarray, "..."], Sequence[Any]]

__all__ = [
    "array_like",
    "scalar_float",
    "scalar_num",
]
